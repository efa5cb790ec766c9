"""Color canonicalization.

Every color comparison in the pipeline goes through ``normalize_color`` on
both sides. Two colors match iff their canonical strings are identical:

- opaque colors become lower-case ``#rrggbb``
- translucent colors (alpha strictly below 1) become ``rgba(r, g, b, a)``
"""

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

_HEX_RE = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$")
_RGB_RE = re.compile(
    r"^rgba?\s*\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)$"
)


def _channel_to_byte(value: float) -> int:
    """Scale a [0, 1] channel to 0-255, rounding half up."""
    return _clamp_byte(math.floor(float(value) * 255 + 0.5))


def _clamp_byte(value: float) -> int:
    return max(0, min(255, int(value)))


def _canonical(r: int, g: int, b: int, alpha: float | None) -> str:
    if alpha is not None:
        alpha = max(0.0, float(alpha))
        if alpha < 1:
            return f"rgba({r}, {g}, {b}, {_format_alpha(alpha)})"
    return f"#{r:02x}{g:02x}{b:02x}"


def _format_alpha(alpha: float) -> str:
    """Up to 6 significant digits; never prints a translucent alpha as 1."""
    text = f"{alpha:g}"
    if text == "1":
        text = f"{alpha:.15g}"
    return text


def _normalize_channels(color: Mapping[str, Any] | Sequence[Any]) -> str:
    if isinstance(color, Mapping):
        r, g, b = color["r"], color["g"], color["b"]
        alpha = color.get("a")
    else:
        if len(color) not in (3, 4):
            raise ValueError(f"Expected 3 or 4 channels, got {len(color)}")
        r, g, b = color[0], color[1], color[2]
        alpha = color[3] if len(color) == 4 else None
    return _canonical(
        _channel_to_byte(r), _channel_to_byte(g), _channel_to_byte(b), alpha
    )


def _normalize_string(value: str) -> str:
    value = value.strip().lower()

    hex_match = _HEX_RE.match(value)
    if hex_match:
        digits = hex_match.group(1)
        # #rgb / #rgba -> #rrggbb / #rrggbbaa
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits)
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        alpha = int(digits[6:8], 16) / 255 if len(digits) == 8 else None
        return _canonical(r, g, b, alpha)

    rgb_match = _RGB_RE.match(value)
    if rgb_match:
        r, g, b = (
            _clamp_byte(math.floor(float(rgb_match.group(i)) + 0.5)) for i in (1, 2, 3)
        )
        alpha = float(rgb_match.group(4)) if rgb_match.group(4) else None
        return _canonical(r, g, b, alpha)

    # Return original if can't parse
    return value


def normalize_color(color: Any) -> str:
    """Normalize a color to its canonical comparable string.

    Accepts channel mappings (``{"r", "g", "b", "a"}``) or sequences in the
    [0, 1] range, hex strings and ``rgb()``/``rgba()`` strings.

    Raises:
        ValueError: If a channel container has the wrong shape.
        TypeError: If the value is not a supported color representation.
    """
    if isinstance(color, str):
        return _normalize_string(color)
    if isinstance(color, Mapping | Sequence):
        return _normalize_channels(color)
    raise TypeError(f"Unsupported color value: {color!r}")


def figma_rgb_to_hex(color: Mapping[str, Any]) -> str:
    """Convert a host RGB/RGBA channel color to its canonical string."""
    return _normalize_channels(color)


def extract_color_from_paint(paint: Mapping[str, Any]) -> str | None:
    """Canonical color of a solid paint, or None for any other paint type."""
    if paint.get("type") == "SOLID" and isinstance(paint.get("color"), Mapping):
        return figma_rgb_to_hex(paint["color"])
    return None


def colors_match(color1: Any, color2: Any) -> bool:
    """Check if two colors are exactly the same after canonicalization."""
    return normalize_color(color1) == normalize_color(color2)
