"""Command-line interface for token-reconnect.

Modules:
    main: click command group (scan, fix, session, config)
    output: OutputManager for consistent CLI output with color/quiet support
"""

from .main import cli
from .output import OutputConfig, OutputManager, should_use_color

__all__ = [
    "cli",
    "OutputConfig",
    "OutputManager",
    "should_use_color",
]
