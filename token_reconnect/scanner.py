"""Document scanner for detached styles.

Walks a page or a selection depth-first and records every style value that
is set directly on a node slot, neither bound to a variable nor covered by a
named style. The walk is all-or-nothing with respect to the node budget:
scopes larger than ``ScanOptions.node_limit`` are not scanned at all.
"""

import uuid
from collections.abc import Iterable
from typing import Any

from .colors import extract_color_from_paint
from .config import ScanOptions
from .document import MIXED, DocumentAccess
from .models import DetachedStyle, DetachedStylesMap, ScanResult, StyleCategory
from .reconnect_logging import LogCategory, get_category_logger
from .units import format_number, format_px

logger = get_category_logger(LogCategory.SCANNER)

PADDING_SLOTS = ("paddingLeft", "paddingRight", "paddingTop", "paddingBottom")
SPACING_SLOTS = ("itemSpacing", *PADDING_SLOTS)


def generate_style_id() -> str:
    """Opaque id for a detached style, unique per scan."""
    return uuid.uuid4().hex


def has_variable_binding(node: dict[str, Any], prop: str) -> bool:
    """Check if a node slot is bound to a variable."""
    bound = node.get("boundVariables")
    return isinstance(bound, dict) and bool(bound.get(prop))


def has_style_applied(node: dict[str, Any], style_field: str) -> bool:
    """Check if a named style is assigned through a style-id field."""
    style_id = node.get(style_field)
    return style_id is not None and style_id is not MIXED and style_id != ""


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


class DocumentScanner:
    """Enumerates detached styles in a document scope.

    The scanner holds no state between runs; each call to ``scan`` produces
    fresh records with fresh ids.
    """

    def __init__(self, document: DocumentAccess, options: ScanOptions | None = None):
        """Initialize the scanner.

        Args:
            document: Read access point to the host document.
            options: Scan options. Uses defaults if not provided.
        """
        self.document = document
        self.options = options or ScanOptions()

    async def resolve_scope(self, scope: Iterable[str] | None) -> list[str]:
        """Root node ids for a scope: the page's children when None."""
        if scope is None:
            return await self.document.get_page_children()
        return list(scope)

    async def count_nodes(self, roots: Iterable[str]) -> int:
        """Count every node under the roots, containers and hidden nodes included."""
        seen: set[str] = set()
        stack = list(roots)
        while stack:
            node_id = stack.pop()
            if node_id in seen:
                continue
            seen.add(node_id)
            stack.extend(await self._children_or_leaf(node_id))
        return len(seen)

    async def _children_or_leaf(self, node_id: str) -> list[str]:
        """Child ids of a node; a node whose children cannot be read is a leaf."""
        try:
            return await self.document.get_children(node_id)
        except Exception as e:
            logger.warning(
                f"Cannot read children of node {node_id}: {e}",
                extra={"node_id": node_id},
            )
            return []

    async def scan(self, scope: Iterable[str] | None = None) -> ScanResult:
        """Scan a selection (list of root ids) or the whole page (None).

        Returns:
            ScanResult. When the node count exceeds the budget the result is
            empty with ``has_exceeded_limit`` set.
        """
        roots = await self.resolve_scope(scope)
        result = ScanResult()
        result.node_count = await self.count_nodes(roots)

        if result.node_count > self.options.node_limit:
            logger.warning(
                f"Scope has {result.node_count} nodes, over the limit of "
                f"{self.options.node_limit}; skipping scan",
                extra={"node_count": result.node_count},
            )
            result.has_exceeded_limit = True
            return result

        await self._traverse(roots, result.detached_styles)
        logger.info(
            f"Scanned {result.node_count} nodes, found "
            f"{result.detached_styles.total} detached styles",
            extra={"node_count": result.node_count},
        )
        return result

    async def _traverse(self, roots: list[str], styles: DetachedStylesMap) -> None:
        """Depth-first pre-order walk, visiting each node at most once."""
        visited: set[str] = set()
        stack = list(reversed(roots))

        while stack:
            node_id = stack.pop()
            if node_id in visited:
                continue
            visited.add(node_id)

            try:
                node = await self.document.get_node(node_id)
            except Exception as e:
                logger.warning(
                    f"Skipping unreadable node {node_id}: {e}",
                    extra={"node_id": node_id},
                )
                continue
            if node is None:
                logger.debug(f"Node disappeared during scan: {node_id}")
                continue

            if not self.options.include_hidden and node.get("visible", True) is False:
                continue

            try:
                found = self.extract_node_styles(node)
            except Exception as e:
                logger.warning(
                    f"Skipping node {node_id} ({node.get('name', '?')}): {e}",
                    extra={"node_id": node_id},
                )
            else:
                self._merge(styles, found)

            children = await self._children_or_leaf(node_id)
            stack.extend(reversed(children))

    @staticmethod
    def _merge(target: DetachedStylesMap, found: DetachedStylesMap) -> None:
        target.fills.extend(found.fills)
        target.strokes.extend(found.strokes)
        target.effects.extend(found.effects)
        target.corner_radius.extend(found.corner_radius)
        target.spacing.extend(found.spacing)
        target.typography.extend(found.typography)

    def extract_node_styles(self, node: dict[str, Any]) -> DetachedStylesMap:
        """Extract the detached styles of a single node snapshot.

        Raises on unexpected node shapes; the caller drops the node.
        """
        include = self.options.include_styles
        found = DetachedStylesMap()

        if include.fills and "fills" in node:
            found.fills = self._extract_paints(node, "fills", "fillStyleId", "fill")
        if include.strokes and "strokes" in node:
            found.strokes = self._extract_paints(
                node, "strokes", "strokeStyleId", "stroke"
            )
        if include.effects and "effects" in node:
            found.effects = self._extract_effects(node)
        if include.corner_radius and "cornerRadius" in node:
            found.corner_radius = self._extract_corner_radius(node)
        if (
            include.spacing
            and node.get("type") == "FRAME"
            and node.get("layoutMode", "NONE") != "NONE"
        ):
            found.spacing = self._extract_spacing(node)
        if include.typography and node.get("type") == "TEXT":
            found.typography = self._extract_typography(node)

        return found

    def _record(
        self,
        node: dict[str, Any],
        category: StyleCategory,
        value: str,
        original_value: Any,
        property_name: str,
    ) -> DetachedStyle:
        return DetachedStyle(
            id=generate_style_id(),
            node_id=node["id"],
            node_name=node.get("name", ""),
            category=category,
            value=value,
            original_value=original_value,
            property_name=property_name,
        )

    def _extract_paints(
        self, node: dict[str, Any], slot: str, style_field: str, prefix: str
    ) -> list[DetachedStyle]:
        if has_style_applied(node, style_field) or has_variable_binding(node, slot):
            return []

        paints = node[slot]
        if paints is MIXED or paints is None:
            return []
        if not isinstance(paints, list):
            raise TypeError(f"{slot} is not a paint list")

        records = []
        for index, paint in enumerate(paints):
            if paint.get("type") != "SOLID":
                continue
            bound = paint.get("boundVariables") or {}
            if bound.get("color"):
                continue
            color = extract_color_from_paint(paint)
            if color:
                records.append(
                    self._record(
                        node,
                        StyleCategory.COLOR,
                        color,
                        paint["color"],
                        f"{prefix}[{index}]",
                    )
                )
        return records

    def _extract_effects(self, node: dict[str, Any]) -> list[DetachedStyle]:
        if has_style_applied(node, "effectStyleId") or has_variable_binding(
            node, "effects"
        ):
            return []

        effects = node["effects"]
        if effects is MIXED or effects is None:
            return []
        if not isinstance(effects, list):
            raise TypeError("effects is not a list")

        # Effects are reported for review but never matched
        return [
            self._record(
                node,
                StyleCategory.OTHER,
                f"Effect: {effect.get('type', 'UNKNOWN')}",
                effect,
                f"effect[{index}]",
            )
            for index, effect in enumerate(effects)
        ]

    def _extract_corner_radius(self, node: dict[str, Any]) -> list[DetachedStyle]:
        if has_variable_binding(node, "cornerRadius"):
            return []

        radius = node["cornerRadius"]
        if not _is_number(radius) or radius == 0:
            return []
        return [
            self._record(
                node, StyleCategory.CORNER_RADIUS, format_px(radius), radius, "cornerRadius"
            )
        ]

    def _extract_spacing(self, node: dict[str, Any]) -> list[DetachedStyle]:
        slots = SPACING_SLOTS if self.options.include_padding else ("itemSpacing",)
        records = []
        for slot in slots:
            if slot not in node or has_variable_binding(node, slot):
                continue
            spacing = node[slot]
            # Zero is the default, not an override
            if not _is_number(spacing) or spacing == 0:
                continue
            records.append(
                self._record(node, StyleCategory.SPACING, format_px(spacing), spacing, slot)
            )
        return records

    def _extract_typography(self, node: dict[str, Any]) -> list[DetachedStyle]:
        if (
            has_style_applied(node, "textStyleId")
            or has_variable_binding(node, "fontName")
            or has_variable_binding(node, "fontSize")
        ):
            return []

        font_name = node.get("fontName")
        font_size = node.get("fontSize")
        if not isinstance(font_name, dict) or not _is_number(font_size):
            return []

        family = font_name.get("family")
        line_height = node.get("lineHeight")
        if not family:
            return []
        return [
            self._record(
                node,
                StyleCategory.TYPOGRAPHY,
                f"{family} {format_number(font_size)}",
                {
                    "fontFamily": family,
                    "fontSize": font_size,
                    "fontWeight": font_name.get("style"),
                    "lineHeight": (
                        None if line_height is MIXED else line_height
                    ),
                },
                "typography",
            )
        ]


async def scan_for_detached_styles(
    document: DocumentAccess,
    scope: Iterable[str] | None = None,
    options: ScanOptions | None = None,
) -> ScanResult:
    """Scan a selection or the whole page for detached styles."""
    return await DocumentScanner(document, options).scan(scope)
