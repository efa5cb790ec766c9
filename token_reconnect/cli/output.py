"""Centralized output manager for the CLI with color and quiet mode support.

Honors the NO_COLOR convention (https://no-color.org/), FORCE_COLOR,
--no-color and --quiet. Symbols fall back to plain ASCII markers when
color is off.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

import click


def should_use_color(
    explicit_flag: bool | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Determine if color output should be used.

    Priority order:
    1. Explicit --no-color flag (if passed)
    2. NO_COLOR environment variable
    3. FORCE_COLOR environment variable
    4. TTY detection
    """
    if explicit_flag is not None:
        return explicit_flag

    # Any value, including empty, means "no color"
    if "NO_COLOR" in os.environ:
        return False

    if "FORCE_COLOR" in os.environ:
        return True

    if stream is None:
        stream = sys.stdout
    if hasattr(stream, "isatty") and not stream.isatty():
        return False

    return True


@dataclass
class OutputConfig:
    """Configuration for CLI output behavior."""

    use_color: bool = True
    quiet: bool = False
    verbose: bool = False
    stream: TextIO = field(default_factory=lambda: sys.stdout)
    err_stream: TextIO = field(default_factory=lambda: sys.stderr)

    @classmethod
    def from_flags(
        cls,
        verbose: bool = False,
        quiet: bool = False,
        no_color: bool = False,
    ) -> "OutputConfig":
        """Create OutputConfig from CLI flags."""
        use_color = should_use_color(explicit_flag=False if no_color else None)
        return cls(use_color=use_color, quiet=quiet, verbose=verbose)


class OutputManager:
    """Centralized output handler for the CLI.

    Example:
        >>> output = OutputManager(OutputConfig(use_color=False))
        >>> output.success("Applied 3 fixes")
        [OK] Applied 3 fixes
    """

    COLORS = {
        "green": "\033[92m",
        "red": "\033[91m",
        "yellow": "\033[93m",
        "cyan": "\033[96m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "reset": "\033[0m",
    }

    SYMBOLS = {
        "success": {"color": "\033[92m✓\033[0m", "plain": "[OK]"},
        "error": {"color": "\033[91m✗\033[0m", "plain": "[FAIL]"},
        "warning": {"color": "\033[93m⚠\033[0m", "plain": "[WARN]"},
        "info": {"color": "\033[94mℹ\033[0m", "plain": "[INFO]"},
        "skip": {"color": "\033[2m○\033[0m", "plain": "[SKIP]"},
    }

    def __init__(self, config: OutputConfig | None = None):
        self.config = config or OutputConfig()

    def _get_symbol(self, symbol_type: str) -> str:
        symbol_data = self.SYMBOLS.get(symbol_type, self.SYMBOLS["info"])
        return symbol_data["color"] if self.config.use_color else symbol_data["plain"]

    def _colorize(self, text: str, color: str) -> str:
        if not self.config.use_color:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def _output(
        self,
        message: str,
        symbol_type: str | None = None,
        err: bool = False,
        force: bool = False,
    ) -> None:
        """Output a message with optional symbol prefix.

        Args:
            message: Message to output.
            symbol_type: Type of symbol to prefix (or None for no symbol).
            err: Output to stderr instead of stdout.
            force: Output even in quiet mode.
        """
        if self.config.quiet and not err and not force:
            return

        stream = self.config.err_stream if err else self.config.stream
        line = f"{self._get_symbol(symbol_type)} {message}" if symbol_type else message
        click.echo(line, file=stream)

    def success(self, message: str, force: bool = False) -> None:
        self._output(message, symbol_type="success", force=force)

    def error(self, message: str) -> None:
        """Output an error message (always shown, even in quiet mode)."""
        self._output(message, symbol_type="error", err=True, force=True)

    def warning(self, message: str, force: bool = False) -> None:
        self._output(message, symbol_type="warning", force=force)

    def info(self, message: str) -> None:
        self._output(message, symbol_type="info")

    def skip(self, message: str) -> None:
        self._output(message, symbol_type="skip")

    def header(self, title: str) -> None:
        """Output a header line (bold if colors enabled)."""
        if self.config.quiet:
            return
        self._output(self._colorize(title, "bold"))
        self._output("=" * len(title))

    def plain(self, message: str, force: bool = False) -> None:
        self._output(message, force=force)

    def detached_style(
        self, style: dict[str, Any], match_result: dict[str, Any] | None
    ) -> None:
        """Output one detached style with its candidate tokens.

        Args:
            style: Serialized DetachedStyle.
            match_result: Serialized MatchResult for the style, if any.
        """
        location = self._colorize(f"{style['nodeName']} / {style['propertyName']}", "cyan")
        self._output(f"{location}  {style['value']}")

        matches = match_result["matches"] if match_result else []
        if not matches:
            self._output(self._colorize("    no matching token", "dim"))
            return

        for match in matches:
            kind = "style" if "styleId" in match else "variable"
            self._output(f"    -> {match['name']} ({kind}, {match['libraryName']})")
        if match_result.get("hasConflict"):
            self._output(
                "    " + self._colorize("conflict: libraries share this value", "yellow")
            )

    def summary(self, total: int, matched: int = 0, conflicts: int = 0) -> None:
        """Output a scan summary line (shown even in quiet mode)."""
        parts = [f"{total} detached", f"{matched} matched"]
        if conflicts > 0:
            parts.append(f"{conflicts} conflicting")
        symbol_type = "warning" if conflicts > 0 else "success"
        self._output(" | ".join(parts), symbol_type=symbol_type, force=True)
