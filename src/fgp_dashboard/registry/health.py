"""Async health probes over each service's control socket."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable

from fgp_dashboard.config.models import DashboardConfig
from fgp_dashboard.control.client import ControlClient
from fgp_dashboard.errors import ControlSocketError
from fgp_dashboard.registry.models import ConnectError, HealthResult, NotInstalled, Responding

logger = logging.getLogger(__name__)


async def probe(name: str, config: DashboardConfig) -> HealthResult:
    """Probe a single service once. Never raises for transport problems."""
    socket_path = config.socket_path(name)
    if not socket_path.exists():
        return NotInstalled()

    client = ControlClient(socket_path, timeout=config.probe_timeout)
    try:
        response = await client.health()
    except ControlSocketError as exc:
        logger.debug("Health probe for %s failed: %s", name, exc)
        return ConnectError(error=exc.message)

    return Responding(
        ok=response.ok,
        payload=response.result or {},
        error=None if response.ok else response.error_message,
    )


async def probe_all(names: Iterable[str], config: DashboardConfig) -> Dict[str, HealthResult]:
    """Probe every service concurrently, at most max_concurrent_probes at a time."""
    semaphore = asyncio.Semaphore(config.max_concurrent_probes)

    async def _bounded(name: str) -> HealthResult:
        async with semaphore:
            return await probe(name, config)

    keys = list(names)
    results = await asyncio.gather(*(_bounded(name) for name in keys), return_exceptions=True)
    out: Dict[str, HealthResult] = {}
    for key, result in zip(keys, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.error("Health probe for %s raised", key, exc_info=result)
            out[key] = ConnectError(error=str(result) or type(result).__name__)
        else:
            out[key] = result
    return out
