"""Numeric helpers shared by the scanner, extractor and matcher."""

import math
import re

_LEADING_NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def format_number(value: float | int) -> str:
    """Render a number the way the host displays it: ``16``, ``16.5``."""
    if isinstance(value, bool):
        raise TypeError("Booleans are not numeric values")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_px(value: float | int) -> str:
    """Render a length as ``<n>px``."""
    return f"{format_number(value)}px"


def parse_numeric(value: object) -> float | None:
    """Parse the leading number of a value, dropping any unit suffix.

    ``"16px"`` -> 16.0, ``8`` -> 8.0, ``"abc"`` -> None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return None if math.isnan(value) else float(value)
    if not isinstance(value, str):
        return None
    match = _LEADING_NUMBER_RE.match(value)
    if not match:
        return None
    return float(match.group(1))
