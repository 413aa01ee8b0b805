"""Process wiring for the SOGNI NFT monitor: config, rendering and the daemon loop."""
from .config import Config, ConfigValidationError, validate_config
from .daemon import Daemon, main, setup_logging
from .render import build_table, render_cycle

__all__ = [
    "Config",
    "ConfigValidationError",
    "Daemon",
    "build_table",
    "main",
    "render_cycle",
    "setup_logging",
    "validate_config",
]
