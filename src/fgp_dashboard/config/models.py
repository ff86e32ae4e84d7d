"""Pydantic models for dashboard configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_SERVICES_DIR = Path("~/.fgp/services")


class ServerConfig(BaseModel):
    """HTTP listener settings. Loopback only by default."""

    host: str = "127.0.0.1"
    port: int = Field(default=8765, ge=1, le=65535)


class DashboardConfig(BaseModel):
    """Root configuration model for .fgp-dashboard.yaml."""

    services_dir: Path = DEFAULT_SERVICES_DIR
    socket_name: str = "daemon.sock"
    manifest_name: str = "manifest.json"
    probe_timeout: float = Field(default=5.0, gt=0)
    max_concurrent_probes: int = Field(default=16, ge=1)
    start_timeout: float = Field(default=5.0, gt=0)
    stop_timeout: float = Field(default=5.0, gt=0)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("services_dir", mode="after")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    def service_dir(self, name: str) -> Path:
        return self.services_dir / name

    def socket_path(self, name: str) -> Path:
        return self.services_dir / name / self.socket_name

    def manifest_path(self, name: str) -> Path:
        return self.services_dir / name / self.manifest_name
