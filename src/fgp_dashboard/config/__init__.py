"""Dashboard configuration system."""

from fgp_dashboard.config.loader import find_config_file, load_config
from fgp_dashboard.config.models import DashboardConfig, ServerConfig

__all__ = [
    "DashboardConfig",
    "ServerConfig",
    "find_config_file",
    "load_config",
]
