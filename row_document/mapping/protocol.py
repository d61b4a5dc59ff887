"""Document mapper protocol.

Anything that turns incoming rows into documents implements this
interface; DocumentAssembler is the built-in implementation.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DocumentMapper(Protocol):
    """Row -> document mapper protocol."""

    def map_one(self, row: dict[str, Any]) -> dict[str, Any]:
        """Map a single row dict to a document."""
        ...

    def map_many(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Map multiple row dicts to documents, in order."""
        ...
