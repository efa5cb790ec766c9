"""Matcher: exact-value token candidates for detached styles.

Each detached style is compared against the tokens and styles of every
library in the same category only. Matching is exact by construction, so
candidates are kept in library order then token order rather than ranked.

Category rules:
- COLOR: canonical color string equality (both sides normalized)
- TYPOGRAPHY: case-insensitive whole-string equality
- SPACING / CORNER_RADIUS: numeric equality after stripping units
- OTHER: never matched
"""

from collections.abc import Callable

from .colors import normalize_color
from .library.conflicts import check_for_conflicts, conflict_key
from .models import DetachedStyle, LibraryInfo, MatchResult, StyleCategory, VariableMatch
from .reconnect_logging import LogCategory, get_category_logger
from .units import parse_numeric

logger = get_category_logger(LogCategory.MATCHER)


def _numeric_equals(target: float) -> Callable[[str], bool]:
    def predicate(value: str) -> bool:
        candidate = parse_numeric(value)
        # Unparseable candidates are skipped
        return candidate is not None and candidate == target

    return predicate


def value_predicate(detached_style: DetachedStyle) -> Callable[[str], bool] | None:
    """Equality rule for candidate values of the detached style's category.

    Returns None when the style cannot match anything.
    """
    category = detached_style.category

    if category is StyleCategory.COLOR:
        target_color = normalize_color(detached_style.value)
        return lambda value: normalize_color(value) == target_color

    if category is StyleCategory.TYPOGRAPHY:
        target_text = detached_style.value.lower()
        return lambda value: value.lower() == target_text

    if category in (StyleCategory.SPACING, StyleCategory.CORNER_RADIUS):
        target_number = parse_numeric(detached_style.value)
        if target_number is None:
            return None
        return _numeric_equals(target_number)

    return None


def find_matches_for_style(
    detached_style: DetachedStyle, libraries: list[LibraryInfo]
) -> list[VariableMatch]:
    """All same-category tokens and styles whose value equals the style's."""
    predicate = value_predicate(detached_style)
    if predicate is None:
        return []

    category = detached_style.category
    matches: list[VariableMatch] = []

    for library in libraries:
        for variable in library.variables.values():
            if variable.category is category and predicate(variable.value):
                matches.append(
                    VariableMatch(
                        id=variable.id,
                        name=variable.name,
                        library_id=library.id,
                        library_name=library.name,
                        value=variable.value,
                        variable_id=variable.id,
                        variable_name=variable.name,
                    )
                )
        for style in library.styles.values():
            if style.category is category and predicate(style.value):
                matches.append(
                    VariableMatch(
                        id=style.id,
                        name=style.name,
                        library_id=library.id,
                        library_name=library.name,
                        value=style.value,
                        style_id=style.id,
                        style_name=style.name,
                    )
                )

    return matches


def has_conflict(matches: list[VariableMatch], conflicts: dict[str, list[str]]) -> bool:
    """Whether the candidates span libraries that collide on a matched value."""
    if len(matches) < 2:
        return False
    if len({match.library_id for match in matches}) < 2:
        return False
    return any(
        len(conflicts.get(conflict_key(match.value), [])) > 1 for match in matches
    )


def find_matches(
    detached_styles: list[DetachedStyle], libraries: list[LibraryInfo]
) -> list[MatchResult]:
    """Match every detached style, one result per style in input order."""
    conflicts = check_for_conflicts(libraries)

    results = []
    for detached_style in detached_styles:
        matches = find_matches_for_style(detached_style, libraries)
        results.append(
            MatchResult(
                detached_style_id=detached_style.id,
                matches=matches,
                has_conflict=has_conflict(matches, conflicts),
            )
        )

    matched = sum(1 for result in results if result.matches)
    logger.debug(
        f"Matched {matched}/{len(results)} detached styles "
        f"({len(conflicts)} conflicting values across libraries)"
    )
    return results
