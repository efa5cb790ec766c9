"""Base class for token stores.

A token store is the read access point to the host's token collections
(variables) and predefined reusable styles. The extractor turns its raw
records into ``LibraryInfo`` values.
"""

from abc import ABC, abstractmethod
from typing import Any

STYLE_KINDS = ("PAINT", "TEXT", "EFFECT", "GRID")


class TokenStore(ABC):
    """Abstract async read access to token libraries.

    Raw records follow the host's shapes:

    - library: ``{"id", "name"}``
    - variable: ``{"id", "name", "resolvedType", "modes", "valuesByMode"}``
    - style: ``{"id", "name", "type", ...}`` with ``paints`` for PAINT,
      ``fontName``/``fontSize`` for TEXT, ``effects`` for EFFECT and
      ``layoutGrids`` for GRID styles
    """

    @abstractmethod
    async def get_libraries(self) -> list[dict[str, Any]]:
        """List connected libraries."""
        ...

    @abstractmethod
    async def get_variables(self, library_id: str) -> list[dict[str, Any]]:
        """List the variables defined in a library."""
        ...

    async def get_styles(self, library_id: str, kind: str) -> list[dict[str, Any]]:
        """List predefined styles of one kind in a library.

        Stores without style support return nothing.
        """
        return []
