"""Data models for probe outcomes and service status."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union


class ServiceStatus(str, Enum):
    """Built-in status labels. A healthy service may report its own label instead."""

    RUNNING = "running"
    STOPPED = "stopped"
    UNHEALTHY = "unhealthy"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class Responding:
    """The service answered a health call."""

    ok: bool
    payload: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


@dataclass(frozen=True)
class ConnectError:
    """The endpoint exists but the connection or the call failed."""

    error: str


@dataclass(frozen=True)
class NotInstalled:
    """No endpoint exists: the service is not running."""


HealthResult = Union[Responding, ConnectError, NotInstalled]


@dataclass(frozen=True)
class HealthPayload:
    """Typed view over a health result object.

    Every field is optional. Missing or wrongly typed values read as None.
    """

    status: Optional[str] = None
    version: Optional[str] = None
    uptime_seconds: Optional[int] = None
    pid: Optional[int] = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HealthPayload:
        return cls(
            status=_as_str(data.get("status")),
            version=_as_str(data.get("version")),
            uptime_seconds=_as_uint(data.get("uptime_seconds")),
            pid=_as_uint(data.get("pid")),
            raw=data,
        )


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_uint(value: Any) -> Optional[int]:
    # bool is an int subclass; a JSON true is not an uptime
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


@dataclass
class ServiceRecord:
    """One row of the service listing."""

    name: str
    status: str
    control_address: str
    version: Optional[str] = None
    uptime_seconds: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "version": self.version,
            "uptime_seconds": self.uptime_seconds,
            "control_address": self.control_address,
            "error": self.error,
        }


@dataclass
class ServiceHealthDetail:
    """Raw health payload of one reachable, healthy service."""

    name: str
    control_address: str
    payload: dict[str, Any] = field(default_factory=dict)
