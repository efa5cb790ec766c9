"""Resolver: applies user-approved fixes to the document.

Fixes are applied one at a time with best-effort semantics: a failing fix
is logged and counted, earlier fixes stay applied and later fixes still
run. Nodes and slots are re-resolved from the ids recorded at scan time
because the document may have changed since.
"""

import re
from typing import Any

from .document import DocumentAccess
from .errors import ReconnectError, StaleReferenceError, UnsupportedOperationError
from .models import ApplyResult, DetachedStyle, Fix, StyleCategory
from .reconnect_logging import LogCategory, get_category_logger
from .scanner import SPACING_SLOTS

logger = get_category_logger(LogCategory.RESOLVER)

PAINT_PROPERTY_RE = re.compile(r"^(fill|stroke)\[(\d+)\]$")
PAINT_TARGETS = {"fill": ("fills", "fillStyleId"), "stroke": ("strokes", "strokeStyleId")}


def variable_alias(variable_id: str) -> dict[str, str]:
    """Binding value that points a slot at a variable."""
    return {"type": "VARIABLE_ALIAS", "id": variable_id}


def summarize(applied_count: int, error_count: int) -> ApplyResult:
    """Build the batch outcome from its counts."""
    if error_count == 0:
        return ApplyResult(
            success=True,
            message=f"Successfully applied {applied_count} fixes.",
            applied_count=applied_count,
            error_count=0,
        )
    if applied_count > 0:
        message = f"Applied {applied_count} fixes with {error_count} errors."
    else:
        message = f"Failed to apply fixes: {error_count} errors."
    return ApplyResult(
        success=False,
        message=message,
        applied_count=applied_count,
        error_count=error_count,
    )


class FixResolver:
    """Applies fixes against a document, one mutation per fix."""

    def __init__(self, document: DocumentAccess):
        self.document = document

    async def apply_fixes(
        self, fixes: list[Fix], detached_styles: dict[str, DetachedStyle]
    ) -> ApplyResult:
        """Apply a batch of fixes.

        Args:
            fixes: User decisions, each naming a detached style id and a
                target variable or style.
            detached_styles: The current scan's styles by id. Ids from any
                other scan are treated as not found.

        Returns:
            ApplyResult where ``applied_count + error_count == len(fixes)``.
        """
        if not fixes:
            return ApplyResult(success=False, message="No fixes to apply.")

        applied_count = 0
        error_count = 0

        for fix in fixes:
            try:
                await self.apply_fix(fix, detached_styles)
            except ReconnectError as e:
                logger.warning(
                    f"Fix not applied: {e.message}",
                    extra={"detached_style_id": fix.detached_style_id},
                )
                error_count += 1
            except Exception as e:
                logger.error(
                    f"Error applying fix: {e}",
                    extra={"detached_style_id": fix.detached_style_id},
                )
                error_count += 1
            else:
                applied_count += 1

        result = summarize(applied_count, error_count)
        logger.info(result.message)
        return result

    async def apply_fix(
        self, fix: Fix, detached_styles: dict[str, DetachedStyle]
    ) -> None:
        """Apply one fix, raising a ReconnectError when it cannot be applied."""
        detached = detached_styles.get(fix.detached_style_id)
        if detached is None:
            raise StaleReferenceError(
                f"Detached style not found: {fix.detached_style_id}",
                detached_style_id=fix.detached_style_id,
            )

        target_id = fix.target_id
        if not target_id:
            raise UnsupportedOperationError(
                "Fix names neither a variable nor a style",
                detached_style_id=fix.detached_style_id,
            )

        node = await self.document.get_node(detached.node_id)
        if node is None:
            raise StaleReferenceError(
                f"Node not found: {detached.node_id}", node_id=detached.node_id
            )

        category = detached.category
        if category is StyleCategory.COLOR:
            await self._apply_color(detached, fix, target_id)
        elif category is StyleCategory.TYPOGRAPHY:
            await self._apply_typography(node, detached, target_id)
        elif category is StyleCategory.SPACING:
            await self._apply_spacing(detached, fix, target_id)
        elif category is StyleCategory.CORNER_RADIUS:
            await self._apply_corner_radius(detached, fix, target_id)
        else:
            raise UnsupportedOperationError(
                f"Unsupported style category: {category.value}",
                property_name=detached.property_name,
            )

        logger.debug(
            f"Bound {detached.property_name} on {detached.node_name} to {target_id}",
            extra={"node_id": detached.node_id},
        )

    async def _apply_color(
        self, detached: DetachedStyle, fix: Fix, target_id: str
    ) -> None:
        match = PAINT_PROPERTY_RE.match(detached.property_name)
        if not match:
            raise UnsupportedOperationError(
                f"Not a paint slot: {detached.property_name}",
                property_name=detached.property_name,
            )
        slot, style_field = PAINT_TARGETS[match.group(1)]
        index = int(match.group(2))

        if fix.is_style:
            await self.document.set_style_id(detached.node_id, style_field, target_id)
            return

        paints = await self.document.read_slot(detached.node_id, slot)
        if not isinstance(paints, list):
            raise StaleReferenceError(
                f"Node {detached.node_id} no longer has {slot}", node_id=detached.node_id
            )
        if index >= len(paints):
            raise StaleReferenceError(
                f"Invalid {match.group(1)} index: {index}",
                node_id=detached.node_id,
                paint_count=len(paints),
            )
        if paints[index].get("type") != "SOLID":
            raise StaleReferenceError(
                f"{detached.property_name} is no longer a solid color",
                node_id=detached.node_id,
            )

        # Copy the list and the touched paint; the whole list is written back
        updated = list(paints)
        paint = dict(updated[index])
        bound = dict(paint.get("boundVariables") or {})
        bound["color"] = variable_alias(target_id)
        paint["boundVariables"] = bound
        updated[index] = paint

        await self.document.set_paints(detached.node_id, slot, updated)

    async def _apply_typography(
        self, node: dict[str, Any], detached: DetachedStyle, target_id: str
    ) -> None:
        if node.get("type") != "TEXT":
            raise StaleReferenceError(
                f"Node {detached.node_id} is no longer a text node",
                node_id=detached.node_id,
            )
        await self.document.set_style_id(detached.node_id, "textStyleId", target_id)

    async def _apply_spacing(
        self, detached: DetachedStyle, fix: Fix, target_id: str
    ) -> None:
        slot = detached.property_name
        if fix.is_style:
            raise UnsupportedOperationError(
                f"Styles cannot be applied to {slot}", property_name=slot
            )
        if slot not in SPACING_SLOTS:
            raise UnsupportedOperationError(
                f"Not a spacing slot: {slot}", property_name=slot
            )
        if not await self.document.has_slot(detached.node_id, slot):
            raise StaleReferenceError(
                f"Node {detached.node_id} no longer has {slot}", node_id=detached.node_id
            )
        await self._bind_variable(detached.node_id, slot, target_id)

    async def _apply_corner_radius(
        self, detached: DetachedStyle, fix: Fix, target_id: str
    ) -> None:
        if fix.is_style:
            raise UnsupportedOperationError(
                "Styles cannot be applied to cornerRadius", property_name="cornerRadius"
            )
        if not await self.document.has_slot(detached.node_id, "cornerRadius"):
            raise StaleReferenceError(
                f"Node {detached.node_id} no longer has cornerRadius",
                node_id=detached.node_id,
            )
        await self._bind_variable(detached.node_id, "cornerRadius", target_id)

    async def _bind_variable(self, node_id: str, slot: str, variable_id: str) -> None:
        """Merge one binding into the node's binding map."""
        current = await self.document.read_slot(node_id, "boundVariables")
        bindings = dict(current) if isinstance(current, dict) else {}
        bindings[slot] = variable_alias(variable_id)
        await self.document.set_bound_variables(node_id, bindings)


async def apply_fixes(
    document: DocumentAccess,
    fixes: list[Fix],
    detached_styles: dict[str, DetachedStyle],
) -> ApplyResult:
    """Apply a batch of fixes against a document."""
    return await FixResolver(document).apply_fixes(fixes, detached_styles)
