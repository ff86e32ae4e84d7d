"""Exception hierarchy for the dashboard.

Each error carries the HTTP status code it maps to, so the API layer can
render any of them as an error envelope without a lookup table.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for all dashboard errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ControlSocketError(DashboardError):
    """Talking to a daemon over its control socket failed."""


class SupervisorError(DashboardError):
    """The supervisor could not carry out a start or stop."""


class ControlFailure(DashboardError):
    """A requested start/stop could not be performed."""

    def __init__(self, name: str, action: str, message: str) -> None:
        super().__init__(message)
        self.name = name
        self.action = action


class InvalidServiceName(DashboardError):
    """Service name is not a single path component."""

    status_code = 400


class ServiceNotFound(DashboardError):
    """No control endpoint exists for the service."""

    status_code = 404


class ServiceUnreachable(DashboardError):
    """The endpoint exists but the connection or call failed."""


class ServiceUnhealthy(DashboardError):
    """The service answered, but reported a failure."""
