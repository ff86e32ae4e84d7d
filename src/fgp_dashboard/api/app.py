"""FastAPI application factory for the dashboard."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from fgp_dashboard import __version__
from fgp_dashboard.api.envelope import dashboard_error_handler
from fgp_dashboard.api.routes import services
from fgp_dashboard.config.loader import load_config
from fgp_dashboard.config.models import DashboardConfig
from fgp_dashboard.control.supervisor import Supervisor
from fgp_dashboard.errors import DashboardError
from fgp_dashboard.registry.registry import ServiceRegistry

LANDING_DIR = Path(__file__).parent.parent / "landing"


def create_app(
    config: Optional[DashboardConfig] = None,
    supervisor: Optional[Supervisor] = None,
) -> FastAPI:
    app = FastAPI(
        title="FGP Dashboard",
        version=__version__,
        description="Status and control for local daemon services",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config is None:
        config = load_config()
    app.state.config = config
    app.state.registry = ServiceRegistry(config, supervisor=supervisor)

    app.add_exception_handler(DashboardError, dashboard_error_handler)

    @app.get("/health", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(services.router, prefix="/api")

    if LANDING_DIR.is_dir():
        app.mount("/", StaticFiles(directory=str(LANDING_DIR), html=True), name="landing")

    return app
