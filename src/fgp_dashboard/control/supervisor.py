"""Process supervisor: launches daemons from their manifest and asks them to stop."""

from __future__ import annotations

import asyncio
import json
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Protocol

from fgp_dashboard.config.models import DashboardConfig
from fgp_dashboard.control.client import ControlClient
from fgp_dashboard.errors import ControlSocketError, SupervisorError

logger = logging.getLogger(__name__)

LOG_FILENAME = "daemon.log"
POLL_INTERVAL = 0.1
TERMINATE_GRACE = 2.0


class Supervisor(Protocol):
    """Owns process start/stop. Raises SupervisorError when it cannot comply."""

    async def start(self, name: str) -> None: ...

    async def stop(self, name: str) -> None: ...


class ProcessSupervisor:
    """Default supervisor for daemons installed under the services directory.

    ``start`` spawns ``daemon.entrypoint`` from the service manifest as a
    detached process and waits for its control socket to appear. ``stop``
    sends the ``stop`` method over the control socket.
    """

    def __init__(self, config: DashboardConfig) -> None:
        self._config = config

    async def start(self, name: str) -> None:
        service_dir = self._config.service_dir(name)
        if not service_dir.is_dir():
            raise SupervisorError(f"Service '{name}' is not installed")

        socket_path = self._config.socket_path(name)
        if socket_path.exists():
            if await self._responds(socket_path):
                raise SupervisorError(f"Service '{name}' is already running")
            logger.info("Removing stale socket %s", socket_path)
            socket_path.unlink(missing_ok=True)

        command = self._load_command(name, service_dir)
        log_path = service_dir / LOG_FILENAME
        logger.info("Starting %s: %s", name, " ".join(command))
        try:
            with log_path.open("ab") as log:
                process = subprocess.Popen(
                    command,
                    cwd=service_dir,
                    stdin=subprocess.DEVNULL,
                    stdout=log,
                    stderr=subprocess.STDOUT,
                    start_new_session=True,
                )
        except OSError as exc:
            raise SupervisorError(f"Failed to launch service '{name}': {exc}") from exc

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._config.start_timeout
        while loop.time() < deadline:
            if socket_path.exists():
                return
            returncode = process.poll()
            if returncode is not None:
                raise SupervisorError(
                    f"Service '{name}' exited with code {returncode} during startup. Check {log_path}"
                )
            await asyncio.sleep(POLL_INTERVAL)
        if socket_path.exists():
            return
        await self._terminate(process)
        raise SupervisorError(
            f"Service '{name}' did not open {socket_path} within {self._config.start_timeout}s"
        )

    async def stop(self, name: str) -> None:
        socket_path = self._config.socket_path(name)
        if not socket_path.exists():
            raise SupervisorError(f"Service '{name}' is not running")

        client = ControlClient(socket_path, timeout=self._config.stop_timeout)
        try:
            response = await client.stop()
        except ControlSocketError as exc:
            raise SupervisorError(f"Failed to stop service '{name}': {exc.message}") from exc
        if not response.ok:
            raise SupervisorError(response.error_message or f"Service '{name}' refused to stop")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._config.stop_timeout
        while socket_path.exists() and loop.time() < deadline:
            await asyncio.sleep(POLL_INTERVAL)
        if socket_path.exists():
            logger.warning("Service %s acknowledged stop but %s is still present", name, socket_path)

    def _load_command(self, name: str, service_dir: Path) -> list[str]:
        manifest_path = self._config.manifest_path(name)
        if not manifest_path.is_file():
            raise SupervisorError(f"Service '{name}' has no {manifest_path.name}")
        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SupervisorError(f"Cannot read manifest for '{name}': {exc}") from exc

        daemon = manifest.get("daemon") if isinstance(manifest, dict) else None
        entrypoint = daemon.get("entrypoint") if isinstance(daemon, dict) else None
        if not isinstance(entrypoint, str) or not entrypoint.strip():
            raise SupervisorError(f"Manifest for '{name}' has no daemon.entrypoint")

        command = shlex.split(entrypoint)
        extra_args = daemon.get("args", [])
        if isinstance(extra_args, list):
            command.extend(str(arg) for arg in extra_args)
        executable = service_dir / command[0]
        if not Path(command[0]).is_absolute() and executable.exists():
            command[0] = str(executable)
        return command

    async def _terminate(self, process: subprocess.Popen) -> None:
        """SIGTERM a child that never came up, then SIGKILL it after a grace period."""
        logger.warning("Terminating pid %d after failed startup", process.pid)
        process.terminate()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + TERMINATE_GRACE
        while process.poll() is None and loop.time() < deadline:
            await asyncio.sleep(POLL_INTERVAL)
        if process.poll() is None:
            process.kill()
            process.wait()

    async def _responds(self, socket_path: Path) -> bool:
        client = ControlClient(socket_path, timeout=self._config.probe_timeout)
        try:
            response = await client.health()
        except ControlSocketError:
            return False
        return response.ok
