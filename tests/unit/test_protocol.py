"""Unit tests for request parsing."""

from token_reconnect.protocol import (
    ApplyFixesRequest,
    CancelRequest,
    FixPayload,
    ScanRequest,
    parse_request,
)


class TestParseRequest:
    """Tests for parse_request."""

    def test_scan_defaults_to_page(self):
        request = parse_request({"type": "scan"})

        assert isinstance(request, ScanRequest)
        assert request.use_selection is False

    def test_scan_with_selection(self):
        request = parse_request({"type": "scan", "useSelection": True})

        assert request.use_selection is True

    def test_apply_fixes(self):
        request = parse_request(
            {
                "type": "apply-fixes",
                "fixes": [
                    {"detachedStyleId": "d1", "variableId": "v1"},
                    {"detachedStyleId": "d2", "styleId": "S:1", "isStyle": True},
                ],
            }
        )

        assert isinstance(request, ApplyFixesRequest)
        fixes = request.to_fixes()
        assert fixes[0].target_id == "v1"
        assert fixes[0].is_style is False
        assert fixes[1].target_id == "S:1"
        assert fixes[1].is_style is True

    def test_style_fix_with_variable_id(self):
        """Test a style fix may carry the style id in variableId."""
        payload = FixPayload.model_validate(
            {"detachedStyleId": "d1", "variableId": "S:1", "isStyle": True}
        )

        assert payload.to_fix().target_id == "S:1"

    def test_cancel(self):
        assert isinstance(parse_request({"type": "cancel"}), CancelRequest)

    def test_unknown_type_ignored(self):
        assert parse_request({"type": "resize"}) is None
        assert parse_request({}) is None

    def test_non_string_type_ignored(self):
        assert parse_request({"type": ["scan"]}) is None
        assert parse_request({"type": {"a": 1}}) is None

    def test_invalid_payload_ignored(self):
        assert parse_request({"type": "apply-fixes", "fixes": [{"variableId": "v"}]}) is None
        assert parse_request({"type": "apply-fixes", "fixes": "all"}) is None

    def test_non_object_ignored(self):
        assert parse_request(["scan"]) is None
        assert parse_request("scan") is None

    def test_snake_case_population(self):
        request = ScanRequest(use_selection=True)

        assert request.use_selection is True
