"""Data models for detached-style reconnection.

This module defines the records that flow through the pipeline: detached
styles produced by the scanner, library tokens produced by the extractor,
match results produced by the matcher and the fixes consumed by the
resolver. Every record serializes to the camelCase shape used on the panel
message channel.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StyleCategory(Enum):
    """Closed set of style categories.

    Records are tagged with a category and dispatched on it; the set is
    never extended by subclassing.
    """

    COLOR = "COLOR"
    TYPOGRAPHY = "TYPOGRAPHY"
    SPACING = "SPACING"
    CORNER_RADIUS = "CORNER_RADIUS"
    OTHER = "OTHER"


@dataclass
class DetachedStyle:
    """One style value set directly on a node slot without a binding.

    ``node_id`` is a lookup key, not a handle: the node may be gone by the
    time a fix is applied. ``property_name`` names the exact slot, with the
    paint index embedded for paint lists (``fill[2]``).
    """

    id: str
    node_id: str
    node_name: str
    category: StyleCategory
    value: str  # Canonical form: hex/rgba color, "<n>px", "<family> <size>"
    original_value: Any  # Raw value as read from the document
    property_name: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "nodeId": self.node_id,
            "nodeName": self.node_name,
            "category": self.category.value,
            "value": self.value,
            "originalValue": self.original_value,
            "propertyName": self.property_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DetachedStyle":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            node_id=data["nodeId"],
            node_name=data.get("nodeName", ""),
            category=StyleCategory(data["category"]),
            value=data["value"],
            original_value=data.get("originalValue"),
            property_name=data["propertyName"],
        )


@dataclass
class DetachedStylesMap:
    """Detached styles grouped by the slot family they were read from."""

    fills: list[DetachedStyle] = field(default_factory=list)
    strokes: list[DetachedStyle] = field(default_factory=list)
    effects: list[DetachedStyle] = field(default_factory=list)
    corner_radius: list[DetachedStyle] = field(default_factory=list)
    spacing: list[DetachedStyle] = field(default_factory=list)
    typography: list[DetachedStyle] = field(default_factory=list)

    def all(self) -> list[DetachedStyle]:
        """Flatten into one list, grouped in slot-family order."""
        return [
            *self.fills,
            *self.strokes,
            *self.effects,
            *self.corner_radius,
            *self.spacing,
            *self.typography,
        ]

    @property
    def total(self) -> int:
        return (
            len(self.fills)
            + len(self.strokes)
            + len(self.effects)
            + len(self.corner_radius)
            + len(self.spacing)
            + len(self.typography)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "fills": [s.to_dict() for s in self.fills],
            "strokes": [s.to_dict() for s in self.strokes],
            "effects": [s.to_dict() for s in self.effects],
            "cornerRadius": [s.to_dict() for s in self.corner_radius],
            "spacing": [s.to_dict() for s in self.spacing],
            "typography": [s.to_dict() for s in self.typography],
        }


@dataclass
class ScanResult:
    """Outcome of one scan.

    When ``has_exceeded_limit`` is set the styles map is always empty.
    """

    detached_styles: DetachedStylesMap = field(default_factory=DetachedStylesMap)
    node_count: int = 0
    has_exceeded_limit: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "detachedStyles": self.detached_styles.to_dict(),
            "nodeCount": self.node_count,
            "hasExceededLimit": self.has_exceeded_limit,
        }


@dataclass
class LibraryToken:
    """A token variable with its default-mode value."""

    id: str
    name: str
    value: str
    category: StyleCategory

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "category": self.category.value,
        }


@dataclass
class LibraryStyle:
    """A predefined reusable style (paint, text, effect or grid)."""

    id: str
    name: str
    value: str
    category: StyleCategory
    style_type: str  # PAINT, TEXT, EFFECT or GRID

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "category": self.category.value,
            "styleType": self.style_type,
        }


@dataclass
class LibraryInfo:
    """One token source.

    Token ids are unique within a library only; ``(id, token_id)`` is the
    global key.
    """

    id: str
    name: str
    variables: dict[str, LibraryToken] = field(default_factory=dict)
    styles: dict[str, LibraryStyle] = field(default_factory=dict)

    @property
    def token_count(self) -> int:
        return len(self.variables) + len(self.styles)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "variables": {k: v.to_dict() for k, v in self.variables.items()},
            "styles": {k: v.to_dict() for k, v in self.styles.items()},
        }


@dataclass
class VariableMatch:
    """A candidate token or style for one detached style."""

    id: str
    name: str
    library_id: str
    library_name: str
    value: str
    variable_id: str | None = None
    variable_name: str | None = None
    style_id: str | None = None
    style_name: str | None = None
    exact_match: bool = True

    @property
    def is_style(self) -> bool:
        return self.style_id is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "libraryId": self.library_id,
            "libraryName": self.library_name,
            "value": self.value,
            "exactMatch": self.exact_match,
        }
        if self.variable_id is not None:
            result["variableId"] = self.variable_id
            result["variableName"] = self.variable_name
        if self.style_id is not None:
            result["styleId"] = self.style_id
            result["styleName"] = self.style_name
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VariableMatch":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            library_id=data["libraryId"],
            library_name=data["libraryName"],
            value=data["value"],
            variable_id=data.get("variableId"),
            variable_name=data.get("variableName"),
            style_id=data.get("styleId"),
            style_name=data.get("styleName"),
            exact_match=data.get("exactMatch", True),
        )


@dataclass
class MatchResult:
    """Matching outcome for one detached style.

    Candidates keep library order then token order; they are not ranked.
    """

    detached_style_id: str
    matches: list[VariableMatch] = field(default_factory=list)
    has_conflict: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "detachedStyleId": self.detached_style_id,
            "matches": [m.to_dict() for m in self.matches],
            "hasConflict": self.has_conflict,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MatchResult":
        """Create from dictionary."""
        return cls(
            detached_style_id=data["detachedStyleId"],
            matches=[VariableMatch.from_dict(m) for m in data.get("matches", [])],
            has_conflict=data.get("hasConflict", False),
        )


@dataclass
class Fix:
    """A user decision to bind one detached style to a token or style."""

    detached_style_id: str
    variable_id: str | None = None
    style_id: str | None = None
    is_style: bool = False

    @property
    def target_id(self) -> str | None:
        """Id of the token or style to bind, or None when neither is named."""
        if self.is_style:
            return self.style_id or self.variable_id
        return self.variable_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to an apply-fixes payload entry."""
        result: dict[str, Any] = {"detachedStyleId": self.detached_style_id}
        if self.variable_id is not None:
            result["variableId"] = self.variable_id
        if self.style_id is not None:
            result["styleId"] = self.style_id
        if self.is_style:
            result["isStyle"] = True
        return result

    @classmethod
    def from_match(cls, detached_style_id: str, match: VariableMatch) -> "Fix":
        """Build the fix that applies ``match`` to a detached style."""
        if match.is_style:
            return cls(detached_style_id, style_id=match.style_id, is_style=True)
        return cls(detached_style_id, variable_id=match.variable_id or match.id)


@dataclass
class ApplyResult:
    """Aggregated outcome of a batch of fixes."""

    success: bool
    message: str
    applied_count: int = 0
    error_count: int = 0

    @property
    def partial(self) -> bool:
        """Some fixes applied and some failed."""
        return self.applied_count > 0 and self.error_count > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "message": self.message,
            "appliedCount": self.applied_count,
            "errorCount": self.error_count,
        }


@dataclass
class ConflictEntry:
    """Libraries and tokens sharing one normalized value."""

    library_ids: list[str] = field(default_factory=list)
    library_names: list[str] = field(default_factory=list)
    token_ids: list[str] = field(default_factory=list)
    token_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "libraryIds": self.library_ids,
            "libraryNames": self.library_names,
            "tokenIds": self.token_ids,
            "tokenNames": self.token_names,
        }
