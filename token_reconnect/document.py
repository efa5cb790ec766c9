"""Document access point.

The host document store is an external collaborator. This module defines
the async boundary the pipeline talks to and a JSON-backed in-memory
implementation used by the CLI and the tests. Node snapshots are plain
dicts shaped like the host's node model (``fills``, ``strokes``,
``cornerRadius``, ``boundVariables``, ``fillStyleId`` and so on).
"""

import copy
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .errors import StaleReferenceError
from .reconnect_logging import get_logger

logger = get_logger()


class _Mixed:
    """Sentinel for a value that differs across a mixed selection."""

    _instance: "_Mixed | None" = None

    def __new__(cls) -> "_Mixed":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MIXED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Mixed":
        return self

    def __deepcopy__(self, memo: dict) -> "_Mixed":
        return self


MIXED = _Mixed()

# Slots whose literal "MIXED" marker loads as the sentinel
MIXABLE_SLOTS = frozenset(
    [
        "fills",
        "strokes",
        "cornerRadius",
        "itemSpacing",
        "fontName",
        "fontSize",
        "lineHeight",
        "fillStyleId",
        "strokeStyleId",
        "effectStyleId",
        "textStyleId",
    ]
)
PAINT_SLOTS = frozenset(["fills", "strokes"])
STYLE_ID_FIELDS = frozenset(
    ["fillStyleId", "strokeStyleId", "effectStyleId", "textStyleId"]
)


class DocumentAccess(ABC):
    """Async read/write access point to the host document.

    Every call is a potential suspension point. Node ids are weak
    references: any of them may stop resolving between calls.
    """

    @abstractmethod
    async def get_page_children(self) -> list[str]:
        """Ids of the top-level nodes of the current page."""
        ...

    @abstractmethod
    async def get_selection(self) -> list[str]:
        """Ids of the currently selected nodes."""
        ...

    @abstractmethod
    async def get_node(self, node_id: str) -> dict[str, Any] | None:
        """Snapshot of a node's slots (without children), or None if gone."""
        ...

    @abstractmethod
    async def get_children(self, node_id: str) -> list[str]:
        """Ids of a node's children; empty for leaf nodes."""
        ...

    @abstractmethod
    async def has_slot(self, node_id: str, slot: str) -> bool:
        """Whether the node exposes the named structural slot."""
        ...

    @abstractmethod
    async def read_slot(self, node_id: str, slot: str, default: Any = None) -> Any:
        """Current value of a slot, ``MIXED`` when inconsistent."""
        ...

    @abstractmethod
    async def set_paints(
        self, node_id: str, slot: str, paints: list[dict[str, Any]]
    ) -> None:
        """Replace a node's whole paint list (``fills`` or ``strokes``)."""
        ...

    @abstractmethod
    async def set_bound_variables(
        self, node_id: str, bindings: dict[str, Any]
    ) -> None:
        """Replace a node's variable-binding map."""
        ...

    @abstractmethod
    async def set_style_id(self, node_id: str, field: str, style_id: str) -> None:
        """Assign a named style to one of the node's style-id fields."""
        ...


def _load_mixed(node: dict[str, Any]) -> None:
    for slot in MIXABLE_SLOTS:
        if node.get(slot) == "MIXED":
            node[slot] = MIXED


def _dump_value(value: Any) -> Any:
    if value is MIXED:
        return "MIXED"
    if isinstance(value, dict):
        return {k: _dump_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_dump_value(v) for v in value]
    return value


class InMemoryDocument(DocumentAccess):
    """Document held in memory, loaded from and saved to JSON.

    Expected shape::

        {"page": {"id": "0:1", "children": [...]}, "selection": ["1:2"]}
    """

    def __init__(self, page: dict[str, Any], selection: list[str] | None = None):
        self._page = copy.deepcopy(page)
        self._nodes: dict[str, dict[str, Any]] = {}
        self._children: dict[str, list[str]] = {}
        self._index(self._page)
        self._page_id = self._page.get("id", "page")
        self._selection = list(selection or [])

    def _index(self, root: dict[str, Any]) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            node_id = node.get("id")
            if node_id is None:
                raise ValueError(f"Node without id: {node.get('name', '?')}")
            if node_id in self._nodes:
                raise ValueError(f"Duplicate node id: {node_id}")
            _load_mixed(node)
            children = node.get("children", [])
            self._nodes[node_id] = node
            self._children[node_id] = [child["id"] for child in children]
            stack.extend(children)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryDocument":
        """Create from a parsed document dictionary."""
        if "page" not in data:
            raise ValueError("Document is missing the 'page' node")
        return cls(data["page"], data.get("selection", []))

    @classmethod
    def from_file(cls, file_path: Path) -> "InMemoryDocument":
        """Load a document from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            json.JSONDecodeError: If the file is not valid JSON.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"Document file not found: {file_path}")
        data = json.loads(file_path.read_text(encoding="utf-8"))
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the current document state."""
        return {"page": _dump_value(self._page), "selection": list(self._selection)}

    def save(self, file_path: Path) -> Path:
        """Write the current document state as JSON."""
        file_path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.debug(f"Saved document to {file_path}")
        return file_path

    def set_selection(self, node_ids: list[str]) -> None:
        self._selection = list(node_ids)

    def remove_node(self, node_id: str) -> None:
        """Delete a node and its subtree, as a user editing the file would."""
        for parent_id, child_ids in self._children.items():
            if node_id in child_ids:
                child_ids.remove(node_id)
                parent = self._nodes[parent_id]
                parent["children"] = [
                    c for c in parent.get("children", []) if c["id"] != node_id
                ]
                break
        stack = [node_id]
        while stack:
            current = stack.pop()
            stack.extend(self._children.pop(current, []))
            self._nodes.pop(current, None)

    def _require(self, node_id: str) -> dict[str, Any]:
        node = self._nodes.get(node_id)
        if node is None:
            raise StaleReferenceError(f"Node not found: {node_id}", node_id=node_id)
        return node

    async def get_page_children(self) -> list[str]:
        return list(self._children.get(self._page_id, []))

    async def get_selection(self) -> list[str]:
        return [node_id for node_id in self._selection if node_id in self._nodes]

    async def get_node(self, node_id: str) -> dict[str, Any] | None:
        node = self._nodes.get(node_id)
        if node is None:
            return None
        return copy.deepcopy({k: v for k, v in node.items() if k != "children"})

    async def get_children(self, node_id: str) -> list[str]:
        return list(self._children.get(node_id, []))

    async def has_slot(self, node_id: str, slot: str) -> bool:
        node = self._nodes.get(node_id)
        return node is not None and slot in node

    async def read_slot(self, node_id: str, slot: str, default: Any = None) -> Any:
        node = self._require(node_id)
        return copy.deepcopy(node.get(slot, default))

    async def set_paints(
        self, node_id: str, slot: str, paints: list[dict[str, Any]]
    ) -> None:
        if slot not in PAINT_SLOTS:
            raise ValueError(f"Not a paint slot: {slot}")
        node = self._require(node_id)
        node[slot] = copy.deepcopy(list(paints))

    async def set_bound_variables(
        self, node_id: str, bindings: dict[str, Any]
    ) -> None:
        node = self._require(node_id)
        node["boundVariables"] = copy.deepcopy(dict(bindings))

    async def set_style_id(self, node_id: str, field: str, style_id: str) -> None:
        if field not in STYLE_ID_FIELDS:
            raise ValueError(f"Not a style id field: {field}")
        node = self._require(node_id)
        node[field] = style_id
