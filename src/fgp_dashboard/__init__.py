"""fgp-dashboard: status and control surface for local daemon services."""

__version__ = "0.1.0"
