"""Reduces probe outcomes to a display status."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fgp_dashboard.registry.models import (
    ConnectError,
    HealthPayload,
    HealthResult,
    NotInstalled,
    Responding,
    ServiceStatus,
)


@dataclass(frozen=True)
class Classification:
    status: str
    version: Optional[str] = None
    uptime_seconds: Optional[int] = None
    error: Optional[str] = None


def classify(result: HealthResult) -> Classification:
    """Map a probe outcome to (status, version, uptime, error).

    First match wins: no endpoint is stopped; a failed connection or call is
    unreachable; a negative envelope is unhealthy; otherwise the service's
    own status string is used, defaulting to running.
    """
    if isinstance(result, NotInstalled):
        return Classification(status=ServiceStatus.STOPPED.value)
    if isinstance(result, ConnectError):
        return Classification(status=ServiceStatus.UNREACHABLE.value, error=result.error)
    if isinstance(result, Responding):
        if not result.ok:
            return Classification(status=ServiceStatus.UNHEALTHY.value, error=result.error or None)
        payload = HealthPayload.from_mapping(result.payload)
        return Classification(
            status=payload.status or ServiceStatus.RUNNING.value,
            version=payload.version,
            uptime_seconds=payload.uptime_seconds,
        )
    raise TypeError(f"Unknown health result: {result!r}")
