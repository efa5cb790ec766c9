"""Library extractor.

Reads token libraries from a ``TokenStore`` and normalizes every variable
and predefined style into a categorized ``LibraryInfo``. The category rule
is a name-substring heuristic; the matcher and the conflict detector rely
on the categories it assigns.
"""

from dataclasses import dataclass, field
from typing import Any

from ..colors import extract_color_from_paint, figma_rgb_to_hex
from ..errors import NoTokenSourceError
from ..models import LibraryInfo, LibraryStyle, LibraryToken, StyleCategory
from ..reconnect_logging import LogCategory, get_category_logger
from ..units import format_number
from .base import STYLE_KINDS, TokenStore

logger = get_category_logger(LogCategory.LIBRARY)

NO_LIBRARIES_MESSAGE = (
    "No connected libraries found. Please connect a library with variables."
)
NO_VARIABLES_MESSAGE = "No variables found in connected libraries."
ACCESS_ERROR_MESSAGE = "Error accessing connected libraries. Please try again."

RADIUS_KEYWORDS = ("radius", "corner")
SPACING_KEYWORDS = ("spacing", "gap", "padding", "margin")
TYPOGRAPHY_KEYWORDS = ("font", "text", "typography")
LENGTH_UNITS = ("px", "em", "rem")


@dataclass
class LibraryLoadResult:
    """Libraries extracted from a store, or the reason there are none."""

    libraries: list[LibraryInfo] = field(default_factory=list)
    error: NoTokenSourceError | None = None

    @property
    def error_message(self) -> str | None:
        """Panel-facing text of the error, if any."""
        return self.error.message if self.error else None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.libraries)


def determine_category(resolved_type: str | None, name: str, value: Any) -> StyleCategory:
    """Assign a style category to a variable.

    Name matching is a case-insensitive substring test, so "card-radius"
    and "radiusOfCurvature" both count as corner radii.
    """
    lower_name = name.lower()

    if resolved_type == "COLOR":
        return StyleCategory.COLOR

    if resolved_type == "FLOAT":
        if any(keyword in lower_name for keyword in RADIUS_KEYWORDS):
            return StyleCategory.CORNER_RADIUS
        if any(keyword in lower_name for keyword in SPACING_KEYWORDS):
            return StyleCategory.SPACING

    if (
        resolved_type == "STRING"
        and isinstance(value, str)
        and any(unit in value for unit in LENGTH_UNITS)
        and any(keyword in lower_name for keyword in TYPOGRAPHY_KEYWORDS)
    ):
        return StyleCategory.TYPOGRAPHY

    return StyleCategory.OTHER


def resolve_variable_value(variable: dict[str, Any]) -> str | None:
    """Default-mode value of a variable as a comparable string.

    Colors are canonicalized, numbers rendered as the host shows them.
    Aliases and empty values resolve to None.
    """
    modes = variable.get("modes") or []
    if not modes:
        return None
    default_mode = modes[0]
    mode_id = default_mode.get("modeId") if isinstance(default_mode, dict) else default_mode
    value = (variable.get("valuesByMode") or {}).get(mode_id)

    if isinstance(value, dict):
        if all(channel in value for channel in ("r", "g", "b")):
            return figma_rgb_to_hex(value)
        # VARIABLE_ALIAS or another unresolved structure
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return format_number(value)
    if isinstance(value, str) and value != "":
        return value
    return None


def style_value(style: dict[str, Any]) -> tuple[str, StyleCategory] | None:
    """Comparable value and category of a predefined style.

    Paint styles only count when they hold a solid paint.
    """
    style_type = style.get("type")

    if style_type == "PAINT":
        for paint in style.get("paints") or []:
            color = extract_color_from_paint(paint)
            if color:
                return color, StyleCategory.COLOR
        return None

    if style_type == "TEXT":
        font_name = style.get("fontName") or {}
        font_size = style.get("fontSize")
        if not font_name.get("family") or font_size is None:
            return None
        return (
            f"{font_name['family']} {format_number(font_size)}",
            StyleCategory.TYPOGRAPHY,
        )

    if style_type == "EFFECT":
        effects = style.get("effects") or []
        if not effects:
            return None
        return f"Effect: {effects[0].get('type', 'UNKNOWN')}", StyleCategory.OTHER

    if style_type == "GRID":
        grids = style.get("layoutGrids") or []
        if not grids:
            return None
        return f"Grid: {grids[0].get('pattern', 'UNKNOWN')}", StyleCategory.OTHER

    return None


class LibraryExtractor:
    """Builds ``LibraryInfo`` records from a token store.

    A failure in one library is logged and the remaining libraries are
    still processed.
    """

    def __init__(self, store: TokenStore, include_styles: bool = True):
        """Initialize the extractor.

        Args:
            store: Read access point to the token libraries.
            include_styles: Also extract predefined styles.
        """
        self.store = store
        self.include_styles = include_styles

    async def get_libraries(self) -> LibraryLoadResult:
        """Extract every library that holds at least one usable token."""
        try:
            available = await self.store.get_libraries()
        except Exception as e:
            logger.error(f"Error getting connected libraries: {e}")
            return LibraryLoadResult(error=NoTokenSourceError(ACCESS_ERROR_MESSAGE))

        if not available:
            return LibraryLoadResult(error=NoTokenSourceError(NO_LIBRARIES_MESSAGE))

        libraries: list[LibraryInfo] = []
        for library in available:
            library_id = library.get("id", "?")
            try:
                info = await self.extract_library(library)
            except Exception as e:
                logger.warning(
                    f"Error extracting library {library_id}: {e}",
                    extra={"library_id": library_id},
                )
                continue

            if info.token_count == 0:
                logger.debug(f"Library {info.name} has no usable tokens")
                continue
            libraries.append(info)

        if not libraries:
            return LibraryLoadResult(error=NoTokenSourceError(NO_VARIABLES_MESSAGE))

        logger.info(
            f"Loaded {sum(lib.token_count for lib in libraries)} tokens "
            f"from {len(libraries)} libraries"
        )
        return LibraryLoadResult(libraries=libraries)

    async def extract_library(self, library: dict[str, Any]) -> LibraryInfo:
        """Extract the variables and styles of one library."""
        info = LibraryInfo(id=library["id"], name=library.get("name", library["id"]))

        for variable in await self.store.get_variables(info.id):
            token = self._extract_variable(variable)
            if token is not None:
                info.variables[token.id] = token

        if self.include_styles:
            for kind in STYLE_KINDS:
                for style in await self.store.get_styles(info.id, kind):
                    extracted = self._extract_style(style)
                    if extracted is not None:
                        info.styles[extracted.id] = extracted

        return info

    def _extract_variable(self, variable: dict[str, Any]) -> LibraryToken | None:
        try:
            value = resolve_variable_value(variable)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Error getting value of variable {variable.get('id')}: {e}")
            return None
        if value is None:
            return None

        name = variable.get("name", "")
        return LibraryToken(
            id=variable["id"],
            name=name,
            value=value,
            category=determine_category(variable.get("resolvedType"), name, value),
        )

    def _extract_style(self, style: dict[str, Any]) -> LibraryStyle | None:
        try:
            resolved = style_value(style)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Error reading style {style.get('id')}: {e}")
            return None
        if resolved is None:
            return None

        value, category = resolved
        return LibraryStyle(
            id=style["id"],
            name=style.get("name", ""),
            value=value,
            category=category,
            style_type=style["type"],
        )


async def get_connected_libraries(store: TokenStore) -> LibraryLoadResult:
    """Convenience function to extract all libraries from a store."""
    return await LibraryExtractor(store).get_libraries()
