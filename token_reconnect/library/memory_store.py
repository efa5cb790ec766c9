"""JSON-backed token store.

Reads a token library export of the form::

    {
      "libraries": [
        {
          "id": "lib-brand",
          "name": "Brand",
          "variables": [
            {"id": "v1", "name": "color/primary", "resolvedType": "COLOR",
             "modes": ["m1"], "valuesByMode": {"m1": {"r": 0.2, "g": 0.4, "b": 0.6}}}
          ],
          "styles": [
            {"id": "s1", "name": "Body", "type": "TEXT",
             "fontName": {"family": "Inter", "style": "Regular"}, "fontSize": 16}
          ]
        }
      ]
    }
"""

import json
from pathlib import Path
from typing import Any

from .base import TokenStore


class InMemoryTokenStore(TokenStore):
    """Token store over already-parsed library records."""

    def __init__(self, libraries: list[dict[str, Any]]):
        self._libraries = {lib["id"]: lib for lib in libraries}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryTokenStore":
        """Create from a parsed export dictionary."""
        libraries = data.get("libraries", [])
        if not isinstance(libraries, list):
            raise ValueError("'libraries' must be a list")
        return cls(libraries)

    @classmethod
    def from_file(cls, file_path: Path) -> "InMemoryTokenStore":
        """Load a token library export.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            json.JSONDecodeError: If the file is not valid JSON.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"Token file not found: {file_path}")
        return cls.from_dict(json.loads(file_path.read_text(encoding="utf-8")))

    async def get_libraries(self) -> list[dict[str, Any]]:
        return [
            {"id": lib["id"], "name": lib.get("name", lib["id"])}
            for lib in self._libraries.values()
        ]

    async def get_variables(self, library_id: str) -> list[dict[str, Any]]:
        library = self._libraries.get(library_id)
        if library is None:
            raise KeyError(f"Unknown library: {library_id}")
        return list(library.get("variables", []))

    async def get_styles(self, library_id: str, kind: str) -> list[dict[str, Any]]:
        library = self._libraries.get(library_id)
        if library is None:
            raise KeyError(f"Unknown library: {library_id}")
        return [s for s in library.get("styles", []) if s.get("type") == kind]
