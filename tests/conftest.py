"""
Shared fixtures for the token-reconnect test suite.

Provides test fixtures for:
- Sample documents (page trees with detached, bound and styled slots)
- Token library exports (one library, two overlapping libraries)
- Files on disk for CLI and config tests
"""

import json
from pathlib import Path
from typing import Any

import pytest

from token_reconnect.document import InMemoryDocument
from token_reconnect.library import InMemoryTokenStore

# #336699 as host channels
BLUE = {"r": 0.2, "g": 0.4, "b": 0.6}
BLACK = {"r": 0.0, "g": 0.0, "b": 0.0}
RED = {"r": 1.0, "g": 0.0, "b": 0.0}


def solid(color: dict[str, float], **extra: Any) -> dict[str, Any]:
    """Build a solid paint."""
    return {"type": "SOLID", "color": dict(color), **extra}


def color_variable(var_id: str, name: str, color: dict[str, float]) -> dict[str, Any]:
    return {
        "id": var_id,
        "name": name,
        "resolvedType": "COLOR",
        "modes": ["m1"],
        "valuesByMode": {"m1": {**color, "a": 1}},
    }


def float_variable(var_id: str, name: str, value: float) -> dict[str, Any]:
    return {
        "id": var_id,
        "name": name,
        "resolvedType": "FLOAT",
        "modes": ["m1"],
        "valuesByMode": {"m1": value},
    }


def make_page(*children: dict[str, Any]) -> dict[str, Any]:
    return {"id": "0:1", "name": "Page 1", "type": "PAGE", "children": list(children)}


@pytest.fixture
def sample_document_data() -> dict[str, Any]:
    """A card frame with one detached value per supported family.

    Detached: Card fill, radius and item spacing; Title fill and typography.
    Not detached: bound Icon fill, zero Icon radius, hidden Badge, styled
    Swatch fill.
    """
    return {
        "page": make_page(
            {
                "id": "1:1",
                "name": "Card",
                "type": "FRAME",
                "layoutMode": "VERTICAL",
                "itemSpacing": 16,
                "paddingLeft": 24,
                "paddingTop": 0,
                "cornerRadius": 8,
                "fills": [solid(BLUE)],
                "strokes": [],
                "children": [
                    {
                        "id": "1:2",
                        "name": "Title",
                        "type": "TEXT",
                        "fontName": {"family": "Inter", "style": "Bold"},
                        "fontSize": 16,
                        "lineHeight": {"unit": "AUTO"},
                        "fills": [solid(BLACK)],
                    },
                    {
                        "id": "1:3",
                        "name": "Icon",
                        "type": "RECTANGLE",
                        "cornerRadius": 0,
                        "fills": [
                            solid(
                                BLUE,
                                boundVariables={
                                    "color": {"type": "VARIABLE_ALIAS", "id": "v-primary"}
                                },
                            )
                        ],
                    },
                    {
                        "id": "1:4",
                        "name": "Badge",
                        "type": "RECTANGLE",
                        "visible": False,
                        "fills": [solid(RED)],
                    },
                    {
                        "id": "1:5",
                        "name": "Swatch",
                        "type": "RECTANGLE",
                        "fillStyleId": "S:brand-blue",
                        "fills": [solid(BLUE)],
                    },
                ],
            }
        ),
        "selection": ["1:2"],
    }


@pytest.fixture
def sample_document(sample_document_data: dict[str, Any]) -> InMemoryDocument:
    """In-memory document built from the sample data."""
    return InMemoryDocument.from_dict(sample_document_data)


@pytest.fixture
def brand_library() -> dict[str, Any]:
    """A library covering every value detached in the sample document."""
    return {
        "id": "lib-brand",
        "name": "Brand",
        "variables": [
            color_variable("v-primary", "color/primary", BLUE),
            color_variable("v-black", "color/black", BLACK),
            float_variable("v-space-md", "spacing/md", 16),
            float_variable("v-radius-md", "radius/md", 8),
        ],
        "styles": [
            {
                "id": "s-title",
                "name": "Heading/Bold",
                "type": "TEXT",
                "fontName": {"family": "Inter", "style": "Bold"},
                "fontSize": 16,
            },
        ],
    }


@pytest.fixture
def legacy_library() -> dict[str, Any]:
    """A second library that also defines #336699."""
    return {
        "id": "lib-legacy",
        "name": "Legacy",
        "variables": [color_variable("v-legacy-blue", "blue/500", BLUE)],
        "styles": [],
    }


@pytest.fixture
def token_store(brand_library: dict[str, Any]) -> InMemoryTokenStore:
    """Token store with the brand library only."""
    return InMemoryTokenStore([brand_library])


@pytest.fixture
def two_library_store(
    brand_library: dict[str, Any], legacy_library: dict[str, Any]
) -> InMemoryTokenStore:
    """Token store where brand and legacy collide on #336699."""
    return InMemoryTokenStore([brand_library, legacy_library])


@pytest.fixture
def document_file(tmp_path: Path, sample_document_data: dict[str, Any]) -> Path:
    """Sample document written to disk."""
    path = tmp_path / "design.json"
    path.write_text(json.dumps(sample_document_data), encoding="utf-8")
    return path


@pytest.fixture
def tokens_file(tmp_path: Path, brand_library: dict[str, Any]) -> Path:
    """Brand library export written to disk."""
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps({"libraries": [brand_library]}), encoding="utf-8")
    return path
