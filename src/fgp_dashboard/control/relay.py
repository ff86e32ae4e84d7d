"""Forwards start/stop requests to the supervisor and normalizes the outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fgp_dashboard.control.supervisor import Supervisor
from fgp_dashboard.errors import ControlFailure, DashboardError

logger = logging.getLogger(__name__)


@dataclass
class ControlOutcome:
    name: str
    action: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message}


class ControlRelay:
    """Runs a supervisor action and raises ControlFailure if it did not happen."""

    def __init__(self, supervisor: Supervisor) -> None:
        self._supervisor = supervisor

    async def start(self, name: str) -> ControlOutcome:
        return await self._run(name, "start", "started")

    async def stop(self, name: str) -> ControlOutcome:
        return await self._run(name, "stop", "stopped")

    async def _run(self, name: str, action: str, past: str) -> ControlOutcome:
        handler = getattr(self._supervisor, action)
        try:
            await handler(name)
        except DashboardError as exc:
            logger.warning("Failed to %s %s: %s", action, name, exc.message)
            raise ControlFailure(name, action, exc.message or f"Failed to {action} service '{name}'") from exc
        except Exception as exc:
            logger.exception("Supervisor raised while trying to %s %s", action, name)
            raise ControlFailure(name, action, f"Failed to {action} service '{name}': {exc}") from exc
        logger.info("Service %s %s", name, past)
        return ControlOutcome(name=name, action=action, message=f"Service '{name}' {past}")
