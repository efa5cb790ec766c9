"""Cross-library conflict detection.

A value is in conflict when two or more libraries define it. Only color
variables and predefined styles (of any kind) are considered; spacing,
radius and typography variables never produce conflicts.
"""

from ..models import ConflictEntry, LibraryInfo, StyleCategory


def conflict_key(value: str) -> str:
    """Key under which a normalized value is compared across libraries."""
    return value.lower()


def detect_conflicts(libraries: list[LibraryInfo]) -> dict[str, ConflictEntry]:
    """Map each conflicting value to the libraries and tokens defining it."""
    value_map: dict[str, ConflictEntry] = {}

    def add(library: LibraryInfo, token_id: str, token_name: str, value: str) -> None:
        entry = value_map.setdefault(conflict_key(value), ConflictEntry())
        if library.id not in entry.library_ids:
            entry.library_ids.append(library.id)
            entry.library_names.append(library.name)
        entry.token_ids.append(token_id)
        entry.token_names.append(token_name)

    for library in libraries:
        for variable in library.variables.values():
            if variable.category is not StyleCategory.COLOR:
                continue
            add(library, variable.id, variable.name, variable.value)
        for style in library.styles.values():
            add(library, style.id, style.name, style.value)

    return {
        value: entry
        for value, entry in value_map.items()
        if len(entry.library_ids) > 1
    }


def check_for_conflicts(libraries: list[LibraryInfo]) -> dict[str, list[str]]:
    """Map each value defined by two or more libraries to those library ids."""
    return {
        value: entry.library_ids
        for value, entry in detect_conflicts(libraries).items()
    }
