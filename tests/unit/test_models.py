"""Unit tests for wire-format records."""

from token_reconnect.models import Fix, MatchResult, VariableMatch
from token_reconnect.protocol import parse_request


def variable_match() -> VariableMatch:
    return VariableMatch(
        id="v-primary",
        name="color/primary",
        library_id="lib-brand",
        library_name="Brand",
        value="#336699",
        variable_id="v-primary",
        variable_name="color/primary",
    )


def style_match() -> VariableMatch:
    return VariableMatch(
        id="s-title",
        name="Heading/Bold",
        library_id="lib-brand",
        library_name="Brand",
        value="Inter 16",
        style_id="s-title",
        style_name="Heading/Bold",
    )


class TestMatchResult:
    """Tests for MatchResult serialization."""

    def test_from_dict_reads_panel_payload(self):
        result = MatchResult("d1", [variable_match(), style_match()], has_conflict=True)

        restored = MatchResult.from_dict(result.to_dict())

        assert restored == result
        assert restored.matches[1].is_style is True


class TestFix:
    """Tests for building fixes from chosen matches."""

    def test_from_variable_match(self):
        fix = Fix.from_match("d1", variable_match())

        assert fix == Fix("d1", variable_id="v-primary")
        assert fix.target_id == "v-primary"
        assert fix.to_dict() == {"detachedStyleId": "d1", "variableId": "v-primary"}

    def test_from_style_match(self):
        fix = Fix.from_match("d2", style_match())

        assert fix.is_style is True
        assert fix.target_id == "s-title"
        assert fix.to_dict() == {
            "detachedStyleId": "d2",
            "styleId": "s-title",
            "isStyle": True,
        }

    def test_payload_is_accepted_by_apply_request(self):
        """Test serialized fixes parse back into the same fixes."""
        fixes = [Fix.from_match("d1", variable_match()), Fix.from_match("d2", style_match())]

        request = parse_request(
            {"type": "apply-fixes", "fixes": [f.to_dict() for f in fixes]}
        )

        assert request.to_fixes() == fixes
