"""Service registry: discovers installed daemons, probes them and relays control."""

from __future__ import annotations

import asyncio
import os
from typing import List, Optional

from fgp_dashboard.config.models import DashboardConfig
from fgp_dashboard.control.relay import ControlOutcome, ControlRelay
from fgp_dashboard.control.supervisor import ProcessSupervisor, Supervisor
from fgp_dashboard.errors import ServiceNotFound, ServiceUnhealthy, ServiceUnreachable
from fgp_dashboard.registry.classify import classify
from fgp_dashboard.registry.health import probe, probe_all
from fgp_dashboard.registry.models import (
    ConnectError,
    NotInstalled,
    ServiceHealthDetail,
    ServiceRecord,
)
from fgp_dashboard.registry.scanner import list_installed, service_socket_path, validate_service_name


class ServiceRegistry:
    """Registry of locally installed daemon services."""

    def __init__(self, config: DashboardConfig, supervisor: Optional[Supervisor] = None) -> None:
        self._config = config
        self._relay = ControlRelay(supervisor or ProcessSupervisor(config))

    @property
    def config(self) -> DashboardConfig:
        return self._config

    def service_names(self) -> List[str]:
        return list_installed(self._config.services_dir)

    async def list_services(self) -> List[ServiceRecord]:
        """Probe every installed service and return records sorted by name.

        Per-service failures end up in that record's status; this never
        raises because of a monitored service.
        """
        names = self.service_names()
        results = await probe_all(names, self._config)
        records: List[ServiceRecord] = []
        for name in names:
            outcome = classify(results[name])
            records.append(
                ServiceRecord(
                    name=name,
                    status=outcome.status,
                    control_address=str(self._config.socket_path(name)),
                    version=outcome.version,
                    uptime_seconds=outcome.uptime_seconds,
                    error=outcome.error,
                )
            )
        records.sort(key=lambda r: os.fsencode(r.name))
        return records

    async def get_service_health(self, name: str) -> ServiceHealthDetail:
        """Return the raw health payload of *name*.

        Raises ServiceNotFound when there is no endpoint, ServiceUnreachable
        on a transport failure and ServiceUnhealthy on a negative envelope.
        """
        socket_path = service_socket_path(name, self._config)
        result = await probe(name, self._config)
        if isinstance(result, NotInstalled):
            raise ServiceNotFound(f"Service '{name}' is not running")
        if isinstance(result, ConnectError):
            raise ServiceUnreachable(result.error)
        if not result.ok:
            raise ServiceUnhealthy(result.error or f"Service '{name}' reported an error")
        return ServiceHealthDetail(name=name, control_address=str(socket_path), payload=result.payload)

    async def start_service(self, name: str) -> ControlOutcome:
        return await self._relay.start(validate_service_name(name))

    async def stop_service(self, name: str) -> ControlOutcome:
        return await self._relay.stop(validate_service_name(name))

    def get_all_statuses_sync(self) -> List[ServiceRecord]:
        return asyncio.run(self.list_services())
