"""Discovers installed services from the services directory."""

from __future__ import annotations

import logging
from pathlib import Path

from fgp_dashboard.config.models import DashboardConfig
from fgp_dashboard.errors import InvalidServiceName

logger = logging.getLogger(__name__)


def list_installed(services_dir: Path) -> list[str]:
    """Return the names of all service directories under *services_dir*.

    A missing or unreadable root means nothing is installed. Files, hidden
    entries and names that are not valid UTF-8 are skipped. Order is
    whatever the filesystem yields.
    """
    if not services_dir.is_dir():
        return []
    names: list[str] = []
    try:
        for entry in services_dir.iterdir():
            if entry.name.startswith(".") or not entry.is_dir():
                continue
            try:
                entry.name.encode("utf-8")
            except UnicodeEncodeError:
                logger.warning("Skipping service directory with a non-UTF-8 name: %r", entry.name)
                continue
            names.append(entry.name)
    except OSError as exc:
        logger.warning("Cannot read services directory %s: %s", services_dir, exc)
        return []
    return names


def validate_service_name(name: str) -> str:
    """Reject names that would escape the services directory."""
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise InvalidServiceName(f"Invalid service name: {name!r}")
    return name


def service_socket_path(name: str, config: DashboardConfig) -> Path:
    return config.socket_path(validate_service_name(name))
