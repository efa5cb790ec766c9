"""Unit tests for the detached style scanner."""

import pytest

from token_reconnect.config import IncludeStyles, ScanOptions
from token_reconnect.document import InMemoryDocument
from token_reconnect.models import StyleCategory
from token_reconnect.scanner import (
    DocumentScanner,
    has_style_applied,
    has_variable_binding,
    scan_for_detached_styles,
)

BLUE = {"r": 0.2, "g": 0.4, "b": 0.6}


def page_with(*children):
    return InMemoryDocument({"id": "0:1", "type": "PAGE", "children": list(children)})


class FailingDocument(InMemoryDocument):
    """Document whose store fails for selected node ids."""

    def __init__(self, page, broken_nodes=(), broken_children=()):
        super().__init__(page)
        self.broken_nodes = set(broken_nodes)
        self.broken_children = set(broken_children)

    async def get_node(self, node_id):
        if node_id in self.broken_nodes:
            raise RuntimeError("unexpected shape")
        return await super().get_node(node_id)

    async def get_children(self, node_id):
        if node_id in self.broken_children:
            raise RuntimeError("children unavailable")
        return await super().get_children(node_id)


def auto_layout_frame(node_id="1:1", **slots):
    return {"id": node_id, "name": "Stack", "type": "FRAME", "layoutMode": "HORIZONTAL", **slots}


class TestBindingHelpers:
    """Tests for binding and style checks."""

    def test_has_variable_binding(self):
        node = {"boundVariables": {"itemSpacing": {"type": "VARIABLE_ALIAS", "id": "v"}}}
        assert has_variable_binding(node, "itemSpacing") is True
        assert has_variable_binding(node, "cornerRadius") is False
        assert has_variable_binding({}, "itemSpacing") is False

    def test_has_style_applied(self):
        assert has_style_applied({"fillStyleId": "S:1"}, "fillStyleId") is True
        assert has_style_applied({"fillStyleId": ""}, "fillStyleId") is False
        assert has_style_applied({}, "fillStyleId") is False


class TestScanSampleDocument:
    """Tests against the shared sample document."""

    @pytest.mark.asyncio
    async def test_finds_every_detached_family(self, sample_document):
        """Test one record per detached slot, bound/styled/hidden skipped."""
        result = await scan_for_detached_styles(sample_document)
        styles = result.detached_styles

        assert result.node_count == 5
        assert result.has_exceeded_limit is False
        assert [(s.node_name, s.value) for s in styles.fills] == [
            ("Card", "#336699"),
            ("Title", "#000000"),
        ]
        assert styles.strokes == []
        assert [s.value for s in styles.corner_radius] == ["8px"]
        assert [(s.property_name, s.value) for s in styles.spacing] == [
            ("itemSpacing", "16px")
        ]
        assert [s.value for s in styles.typography] == ["Inter 16"]
        assert styles.total == 5

    @pytest.mark.asyncio
    async def test_solid_fill_record(self, sample_document):
        """Test a detached #336699 fill is reported as fill[0]."""
        result = await scan_for_detached_styles(sample_document)
        fill = result.detached_styles.fills[0]

        assert fill.category is StyleCategory.COLOR
        assert fill.value == "#336699"
        assert fill.property_name == "fill[0]"
        assert fill.node_id == "1:1"
        assert fill.original_value == BLUE

    @pytest.mark.asyncio
    async def test_typography_original_value(self, sample_document):
        result = await scan_for_detached_styles(sample_document)
        text = result.detached_styles.typography[0]

        assert text.property_name == "typography"
        assert text.original_value == {
            "fontFamily": "Inter",
            "fontSize": 16,
            "fontWeight": "Bold",
            "lineHeight": {"unit": "AUTO"},
        }

    @pytest.mark.asyncio
    async def test_ids_are_fresh_per_scan(self, sample_document):
        """Test two scans never share detached style ids."""
        first = await scan_for_detached_styles(sample_document)
        second = await scan_for_detached_styles(sample_document)

        first_ids = {s.id for s in first.detached_styles.all()}
        second_ids = {s.id for s in second.detached_styles.all()}
        assert len(first_ids) == 5
        assert first_ids.isdisjoint(second_ids)

    @pytest.mark.asyncio
    async def test_selection_scope(self, sample_document):
        """Test scanning a selection only visits the selected subtree."""
        result = await scan_for_detached_styles(sample_document, scope=["1:2"])

        assert result.node_count == 1
        assert {s.node_id for s in result.detached_styles.all()} == {"1:2"}

    @pytest.mark.asyncio
    async def test_include_hidden(self, sample_document):
        options = ScanOptions(include_hidden=True)
        result = await scan_for_detached_styles(sample_document, options=options)

        assert "Badge" in {s.node_name for s in result.detached_styles.fills}

    @pytest.mark.asyncio
    async def test_disabled_families(self, sample_document):
        options = ScanOptions(
            include_styles=IncludeStyles(fills=False, typography=False)
        )
        result = await scan_for_detached_styles(sample_document, options=options)

        assert result.detached_styles.fills == []
        assert result.detached_styles.typography == []
        assert len(result.detached_styles.spacing) == 1


class TestNodeLimit:
    """Tests for the all-or-nothing node budget."""

    @pytest.mark.asyncio
    async def test_exceeding_limit_returns_empty_result(self):
        """Test a 1200-node selection against a limit of 1000."""
        children = [
            {"id": f"2:{i}", "type": "RECTANGLE", "fills": [{"type": "SOLID", "color": BLUE}]}
            for i in range(1199)
        ]
        document = page_with(auto_layout_frame(itemSpacing=8, children=children))

        result = await scan_for_detached_styles(
            document, scope=["1:1"], options=ScanOptions(node_limit=1000)
        )

        assert result.has_exceeded_limit is True
        assert result.node_count == 1200
        assert result.detached_styles.total == 0

    @pytest.mark.asyncio
    async def test_at_limit_scans(self):
        children = [{"id": f"2:{i}", "type": "RECTANGLE", "cornerRadius": 4} for i in range(9)]
        document = page_with(auto_layout_frame(children=children))

        result = await scan_for_detached_styles(document, options=ScanOptions(node_limit=10))

        assert result.has_exceeded_limit is False
        assert len(result.detached_styles.corner_radius) == 9

    @pytest.mark.asyncio
    async def test_hidden_nodes_count_toward_limit(self):
        document = page_with(
            {"id": "1:1", "type": "RECTANGLE", "visible": False},
            {"id": "1:2", "type": "RECTANGLE"},
        )
        result = await scan_for_detached_styles(document, options=ScanOptions(node_limit=1))

        assert result.has_exceeded_limit is True
        assert result.node_count == 2


class TestSlotRules:
    """Tests for per-slot detection rules."""

    @pytest.mark.asyncio
    async def test_zero_item_spacing_suppressed(self):
        """Test itemSpacing 0 emits nothing even with nonzero padding."""
        document = page_with(
            auto_layout_frame(itemSpacing=0, paddingLeft=12, paddingTop=12)
        )
        result = await scan_for_detached_styles(document)

        assert result.detached_styles.spacing == []

    @pytest.mark.asyncio
    async def test_padding_when_enabled(self):
        document = page_with(
            auto_layout_frame(itemSpacing=0, paddingLeft=12, paddingRight=0)
        )
        result = await scan_for_detached_styles(
            document, options=ScanOptions(include_padding=True)
        )

        assert [(s.property_name, s.value) for s in result.detached_styles.spacing] == [
            ("paddingLeft", "12px")
        ]

    @pytest.mark.asyncio
    async def test_spacing_only_on_auto_layout_frames(self):
        document = page_with(
            {"id": "1:1", "type": "FRAME", "layoutMode": "NONE", "itemSpacing": 8},
            {"id": "1:2", "type": "GROUP", "layoutMode": "VERTICAL", "itemSpacing": 8},
        )
        result = await scan_for_detached_styles(document)

        assert result.detached_styles.spacing == []

    @pytest.mark.asyncio
    async def test_bound_spacing_skipped(self):
        document = page_with(
            auto_layout_frame(
                itemSpacing=8,
                boundVariables={"itemSpacing": {"type": "VARIABLE_ALIAS", "id": "v"}},
            )
        )
        result = await scan_for_detached_styles(document)

        assert result.detached_styles.spacing == []

    @pytest.mark.asyncio
    async def test_zero_and_mixed_radius_suppressed(self):
        document = page_with(
            {"id": "1:1", "type": "RECTANGLE", "cornerRadius": 0},
            {"id": "1:2", "type": "RECTANGLE", "cornerRadius": "MIXED"},
            {"id": "1:3", "type": "RECTANGLE", "cornerRadius": 2.5},
        )
        result = await scan_for_detached_styles(document)

        assert [(s.node_id, s.value) for s in result.detached_styles.corner_radius] == [
            ("1:3", "2.5px")
        ]

    @pytest.mark.asyncio
    async def test_paint_indexes_and_non_solid(self):
        """Test each solid paint is reported with its own index."""
        document = page_with(
            {
                "id": "1:1",
                "type": "RECTANGLE",
                "strokes": [
                    {"type": "GRADIENT_LINEAR", "gradientStops": []},
                    {"type": "SOLID", "color": BLUE},
                    {
                        "type": "SOLID",
                        "color": BLUE,
                        "boundVariables": {"color": {"type": "VARIABLE_ALIAS", "id": "v"}},
                    },
                ],
            }
        )
        result = await scan_for_detached_styles(document)

        assert [s.property_name for s in result.detached_styles.strokes] == ["stroke[1]"]

    @pytest.mark.asyncio
    async def test_mixed_fills_skipped(self):
        document = page_with({"id": "1:1", "type": "TEXT", "fills": "MIXED"})
        result = await scan_for_detached_styles(document)

        assert result.detached_styles.fills == []

    @pytest.mark.asyncio
    async def test_effects_reported_as_other(self):
        document = page_with(
            {"id": "1:1", "type": "RECTANGLE", "effects": [{"type": "DROP_SHADOW"}]}
        )
        result = await scan_for_detached_styles(document)
        effect = result.detached_styles.effects[0]

        assert effect.category is StyleCategory.OTHER
        assert effect.value == "Effect: DROP_SHADOW"
        assert effect.property_name == "effect[0]"

    @pytest.mark.asyncio
    async def test_typography_skipped_when_styled_or_mixed(self):
        font = {"family": "Inter", "style": "Regular"}
        document = page_with(
            {"id": "1:1", "type": "TEXT", "fontName": font, "fontSize": 14, "textStyleId": "S:1"},
            {"id": "1:2", "type": "TEXT", "fontName": font, "fontSize": "MIXED"},
            {"id": "1:3", "type": "TEXT", "fontName": "MIXED", "fontSize": 14},
            {"id": "1:4", "type": "TEXT", "fontName": font, "fontSize": 14.5, "lineHeight": "MIXED"},
        )
        result = await scan_for_detached_styles(document)
        typography = result.detached_styles.typography

        assert [s.node_id for s in typography] == ["1:4"]
        assert typography[0].value == "Inter 14.5"
        assert typography[0].original_value["lineHeight"] is None


class TestTraversal:
    """Tests for traversal order and failure isolation."""

    @pytest.mark.asyncio
    async def test_pre_order(self):
        document = page_with(
            {
                "id": "1:1",
                "type": "RECTANGLE",
                "cornerRadius": 1,
                "children": [
                    {"id": "1:2", "type": "RECTANGLE", "cornerRadius": 2},
                    {"id": "1:3", "type": "RECTANGLE", "cornerRadius": 3},
                ],
            },
            {"id": "1:4", "type": "RECTANGLE", "cornerRadius": 4},
        )
        result = await scan_for_detached_styles(document)

        assert [s.node_id for s in result.detached_styles.corner_radius] == [
            "1:1",
            "1:2",
            "1:3",
            "1:4",
        ]

    @pytest.mark.asyncio
    async def test_hidden_subtree_skipped(self):
        document = page_with(
            {
                "id": "1:1",
                "type": "FRAME",
                "visible": False,
                "children": [{"id": "1:2", "type": "RECTANGLE", "cornerRadius": 4}],
            }
        )
        result = await scan_for_detached_styles(document)

        assert result.detached_styles.total == 0

    @pytest.mark.asyncio
    async def test_duplicate_scope_roots_visited_once(self, sample_document):
        result = await scan_for_detached_styles(sample_document, scope=["1:2", "1:2"])

        assert result.node_count == 1
        assert len(result.detached_styles.fills) == 1

    @pytest.mark.asyncio
    async def test_malformed_node_skipped(self):
        """Test a node that fails extraction is dropped, children still scanned."""
        document = page_with(
            {
                "id": "1:1",
                "type": "RECTANGLE",
                "fills": {"not": "a list"},
                "cornerRadius": 4,
                "children": [{"id": "1:2", "type": "RECTANGLE", "cornerRadius": 6}],
            }
        )
        result = await DocumentScanner(document).scan()

        assert [s.node_id for s in result.detached_styles.all()] == ["1:2"]

    @pytest.mark.asyncio
    async def test_unreadable_node_skipped(self):
        """Test a node the store fails to return does not stop the scan."""
        document = FailingDocument(
            {
                "id": "0:1",
                "type": "PAGE",
                "children": [
                    {"id": "1:1", "type": "RECTANGLE", "fills": [{"type": "SOLID", "color": BLUE}]},
                    {"id": "1:2", "type": "RECTANGLE", "fills": [{"type": "SOLID", "color": BLUE}]},
                ],
            },
            broken_nodes={"1:1"},
        )
        result = await scan_for_detached_styles(document)

        assert result.node_count == 2
        assert [s.node_id for s in result.detached_styles.fills] == ["1:2"]

    @pytest.mark.asyncio
    async def test_unreadable_children_treated_as_leaf(self):
        """Test a node whose children cannot be listed is still scanned."""
        document = FailingDocument(
            {
                "id": "0:1",
                "type": "PAGE",
                "children": [
                    {
                        "id": "1:1",
                        "type": "FRAME",
                        "cornerRadius": 4,
                        "children": [{"id": "1:2", "type": "RECTANGLE", "cornerRadius": 6}],
                    },
                    {"id": "1:3", "type": "RECTANGLE", "cornerRadius": 2},
                ],
            },
            broken_children={"1:1"},
        )
        result = await scan_for_detached_styles(document)

        assert result.node_count == 2
        assert [s.node_id for s in result.detached_styles.corner_radius] == ["1:1", "1:3"]
