"""Control socket client, process supervisor and start/stop relay."""

from __future__ import annotations

from fgp_dashboard.control.client import ControlClient, ControlRequest, ControlResponse
from fgp_dashboard.control.relay import ControlOutcome, ControlRelay
from fgp_dashboard.control.supervisor import ProcessSupervisor, Supervisor

__all__ = [
    "ControlClient",
    "ControlOutcome",
    "ControlRelay",
    "ControlRequest",
    "ControlResponse",
    "ProcessSupervisor",
    "Supervisor",
]
