"""Message protocol between the interface and the session.

Requests arrive as JSON objects carrying a ``type`` discriminator and are
validated with pydantic. Responses are plain dicts built by the session.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import Fix
from .reconnect_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.SESSION)

SCAN = "scan"
APPLY_FIXES = "apply-fixes"
CANCEL = "cancel"
SCAN_COMPLETE = "scan-complete"
APPLY_COMPLETE = "apply-complete"


class ProtocolModel(BaseModel):
    """Base for request models: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FixPayload(ProtocolModel):
    """One fix as sent by the interface."""

    detached_style_id: str = Field(alias="detachedStyleId")
    variable_id: str | None = Field(default=None, alias="variableId")
    style_id: str | None = Field(default=None, alias="styleId")
    is_style: bool = Field(default=False, alias="isStyle")

    def to_fix(self) -> Fix:
        return Fix(
            detached_style_id=self.detached_style_id,
            variable_id=self.variable_id,
            style_id=self.style_id,
            is_style=self.is_style,
        )


class ScanRequest(ProtocolModel):
    """Scan the current selection, or the whole page."""

    type: Literal["scan"] = SCAN
    use_selection: bool = Field(default=False, alias="useSelection")


class ApplyFixesRequest(ProtocolModel):
    """Apply fixes against the most recent scan."""

    type: Literal["apply-fixes"] = APPLY_FIXES
    fixes: list[FixPayload] = Field(default_factory=list)

    def to_fixes(self) -> list[Fix]:
        return [payload.to_fix() for payload in self.fixes]


class CancelRequest(ProtocolModel):
    """Close the session."""

    type: Literal["cancel"] = CANCEL


Request = ScanRequest | ApplyFixesRequest | CancelRequest

REQUEST_TYPES: dict[str, type[ProtocolModel]] = {
    SCAN: ScanRequest,
    APPLY_FIXES: ApplyFixesRequest,
    CANCEL: CancelRequest,
}


def parse_request(message: Any) -> Request | None:
    """Validate an inbound message.

    Returns:
        The typed request, or None for unknown types and invalid payloads.
    """
    if not isinstance(message, dict):
        logger.warning(f"Ignoring non-object message: {message!r}")
        return None

    message_type = message.get("type")
    model = REQUEST_TYPES.get(message_type) if isinstance(message_type, str) else None
    if model is None:
        logger.warning(f"Ignoring unknown message type: {message_type!r}")
        return None

    try:
        return model.model_validate(message)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid {message['type']} message: {e}")
        return None


def error_response(response_type: str, error_message: str) -> dict[str, Any]:
    return {"type": response_type, "errorMessage": error_message}
