"""Shared fixtures for dashboard tests."""

from __future__ import annotations

import asyncio
import contextlib
import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

import pytest

from fgp_dashboard.config.models import DashboardConfig


class FakeDaemon:
    """NDJSON control-socket server standing in for a real daemon.

    *responses* maps a method name to the envelope sent back (the request id
    is filled in). *raw* overrides the reply bytes entirely. *delay* holds
    the reply back so callers can hit their timeout.
    """

    def __init__(
        self,
        socket_path: Path,
        responses: Optional[Dict[str, Dict[str, Any]]] = None,
        raw: Optional[bytes] = None,
        delay: float = 0.0,
    ) -> None:
        self.socket_path = socket_path
        self.responses = responses if responses is not None else {"health": {"ok": True, "result": {}}}
        self.raw = raw
        self.delay = delay
        self.requests: List[Dict[str, Any]] = []
        self._server: Optional[asyncio.AbstractServer] = None
        self._release = asyncio.Event()

    async def __aenter__(self) -> FakeDaemon:
        self.socket_path.parent.mkdir(parents=True, exist_ok=True)
        self._server = await asyncio.start_unix_server(self._handle, path=str(self.socket_path))
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self._release.set()
        assert self._server is not None
        self._server.close()
        await self._server.wait_closed()
        self.socket_path.unlink(missing_ok=True)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        with contextlib.suppress(ConnectionError):
            line = await reader.readline()
            if not line:
                writer.close()
                return
            request = json.loads(line)
            self.requests.append(request)
            if self.delay:
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(self._release.wait(), timeout=self.delay)
            if self.raw is not None:
                writer.write(self.raw)
            else:
                envelope = self.responses.get(
                    request.get("method"),
                    {"ok": False, "error": {"code": "METHOD_NOT_FOUND", "message": "unknown method"}},
                )
                writer.write(json.dumps({"id": request.get("id"), **envelope}).encode() + b"\n")
            await writer.drain()
        writer.close()


@pytest.fixture()
def services_dir() -> Iterator[Path]:
    """A services root under a short temp path (Unix socket paths are length-limited)."""
    with tempfile.TemporaryDirectory(prefix="fgp-") as tmp:
        yield Path(tmp) / "services"


@pytest.fixture()
def config(services_dir: Path) -> DashboardConfig:
    return DashboardConfig(
        services_dir=services_dir,
        probe_timeout=1.0,
        start_timeout=3.0,
        stop_timeout=0.5,
    )


@pytest.fixture()
def install_service(services_dir: Path) -> Callable[..., Path]:
    """Create an installed service directory, optionally with a manifest."""

    def _install(name: str, manifest: Optional[Dict[str, Any]] = None) -> Path:
        service_dir = services_dir / name
        service_dir.mkdir(parents=True, exist_ok=True)
        if manifest is not None:
            (service_dir / "manifest.json").write_text(json.dumps(manifest))
        return service_dir

    return _install


@pytest.fixture()
def fake_daemon(config: DashboardConfig) -> Callable[..., FakeDaemon]:
    """Build a FakeDaemon bound to the control socket of a named service."""

    def _make(name: str, **kwargs: Any) -> FakeDaemon:
        return FakeDaemon(config.socket_path(name), **kwargs)

    return _make
