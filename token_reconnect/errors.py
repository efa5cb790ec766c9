"""Structured error types for the reconnection pipeline.

Every error carries a category from the pipeline's error taxonomy and an
optional recovery suggestion. None of them are fatal: the session and the
resolver convert them into human-readable messages or per-fix error counts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of pipeline errors."""

    INPUT_SCOPE = "input_scope"  # Empty selection for a selection scan
    BUDGET_EXCEEDED = "budget_exceeded"  # Node count over the limit
    NO_TOKEN_SOURCE = "no_token_source"  # No usable libraries or tokens
    STALE_REFERENCE = "stale_reference"  # Id, node or slot gone since scan
    UNSUPPORTED_OPERATION = "unsupported_operation"  # No mutation defined
    CONFIGURATION = "configuration"  # Invalid config file or values


@dataclass
class ReconnectError(Exception):
    """Base class for structured pipeline errors.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional additional details dict.
        exit_code: Exit code used when the CLI terminates on this error.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = 1

    def __post_init__(self) -> None:
        """Initialize the exception with the message."""
        super().__init__(self.message)

    def format(self, use_color: bool = True) -> str:
        """Format the error for display.

        Args:
            use_color: Whether to include ANSI color codes.

        Returns:
            Formatted error string with suggestion if available.
        """
        red = "\033[91m" if use_color else ""
        cyan = "\033[96m" if use_color else ""
        dim = "\033[2m" if use_color else ""
        reset = "\033[0m" if use_color else ""

        lines = [f"{red}Error:{reset} {self.message}"]

        if self.suggestion:
            lines.append(f"{cyan}Suggestion:{reset} {self.suggestion}")

        if self.details:
            for key, value in self.details.items():
                lines.append(f"{dim}  {key}: {value}{reset}")

        return "\n".join(lines)

    def __str__(self) -> str:
        """Return the formatted error message."""
        return self.format(use_color=False)


class EmptySelectionError(ReconnectError):
    """A selection scan was requested with nothing selected."""

    def __init__(self) -> None:
        super().__init__(
            category=ErrorCategory.INPUT_SCOPE,
            message="No nodes selected. Please select at least one node.",
            suggestion="Select one or more layers, or scan the whole page.",
            details=None,
        )


class NodeLimitExceededError(ReconnectError):
    """The scope holds more nodes than the scan budget allows."""

    def __init__(self, node_count: int, node_limit: int):
        super().__init__(
            category=ErrorCategory.BUDGET_EXCEEDED,
            message=(
                f"Too many nodes ({node_count} found, limit {node_limit}). "
                "Please select a smaller section."
            ),
            suggestion="Scan a smaller selection or raise scan.nodeLimit.",
            details={"node_count": node_count, "node_limit": node_limit},
        )
        self.node_count = node_count
        self.node_limit = node_limit


class NoTokenSourceError(ReconnectError):
    """No library produced usable tokens."""

    def __init__(self, message: str):
        super().__init__(
            category=ErrorCategory.NO_TOKEN_SOURCE,
            message=message,
            suggestion="Connect a library that defines variables or styles.",
            details=None,
        )


class StaleReferenceError(ReconnectError):
    """A detached style, node or slot referenced by a fix no longer exists."""

    def __init__(self, message: str, **details: Any):
        super().__init__(
            category=ErrorCategory.STALE_REFERENCE,
            message=message,
            suggestion="Re-run the scan and pick the matches again.",
            details=details or None,
        )


class UnsupportedOperationError(ReconnectError):
    """A fix targets a category/slot combination with no mutation."""

    def __init__(self, message: str, **details: Any):
        super().__init__(
            category=ErrorCategory.UNSUPPORTED_OPERATION,
            message=message,
            details=details or None,
        )


class ConfigurationError(ReconnectError):
    """The configuration file or one of its values is invalid."""

    def __init__(self, message: str, config_path: str | None = None):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion="Fix the value or run 'token-reconnect config init'.",
            details={"config_path": config_path} if config_path else None,
            exit_code=2,
        )
