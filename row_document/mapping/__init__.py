"""Mapping layer - field paths, modifier policy and document assembly."""

from __future__ import annotations

from row_document.mapping.document import DocumentAssembler
from row_document.mapping.index import IndexTerm, parse_index_fields
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ApplyPolicy, ModifierOperation, ModifierPolicy
from row_document.mapping.path import PathCursor, PathResolver, compile_path
from row_document.mapping.plan import FieldPlan, IndexPlan, WritePlan
from row_document.mapping.protocol import DocumentMapper

__all__ = [
    "FieldMapping",
    "IndexSpec",
    "IndexTerm",
    "parse_index_fields",
    "ModifierOperation",
    "ApplyPolicy",
    "ModifierPolicy",
    "PathResolver",
    "PathCursor",
    "compile_path",
    "FieldPlan",
    "IndexPlan",
    "WritePlan",
    "DocumentAssembler",
    "DocumentMapper",
]
