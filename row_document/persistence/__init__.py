"""Persistence layer - markup and attribute-store encodings."""

from __future__ import annotations

from row_document.persistence.attributes import (
    AttributeStore,
    InMemoryAttributeStore,
    SqliteAttributeStore,
    load_attributes,
    save_attributes,
)
from row_document.persistence.markup import decode_markup, encode_markup
from row_document.persistence.store import ConfigStore

__all__ = [
    "ConfigStore",
    "encode_markup",
    "decode_markup",
    "save_attributes",
    "load_attributes",
    "AttributeStore",
    "InMemoryAttributeStore",
    "SqliteAttributeStore",
]
