"""Compiled write plan data classes.

Frozen dataclasses produced by ``OutputDefinition.compile()``. A plan
belongs to exactly one worker: the only state that changes while rows are
processed is the cursor held by each PathResolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from row_document.core.config import WriteConfig
from row_document.mapping.index import IndexTerm
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ModifierPolicy
from row_document.mapping.path import PathResolver


@dataclass(frozen=True)
class FieldPlan:
    """A field mapping with its compiled document path."""

    mapping: FieldMapping
    resolver: PathResolver

    @property
    def segments(self) -> tuple[str, ...]:
        return self.resolver.segments

    @property
    def inert(self) -> bool:
        """True when the mapping cannot address any document key."""
        if self.mapping.use_incoming_name_as_key:
            return not self.mapping.incoming_name
        return not any(self.segments)

    def key_path(self) -> tuple[str, ...]:
        """Full key path, including the incoming name when used as the key."""
        if self.mapping.use_incoming_name_as_key:
            return self.segments + (self.mapping.incoming_name,)
        return self.segments

    def dotted_path(self) -> str:
        return ".".join(self.key_path())


@dataclass(frozen=True)
class IndexPlan:
    """An index spec with its parsed terms."""

    spec: IndexSpec
    terms: tuple[IndexTerm, ...]


@dataclass(frozen=True)
class WritePlan:
    """Compiled, per-worker plan for turning rows into documents."""

    write: WriteConfig
    policy: ModifierPolicy
    field_plans: tuple[FieldPlan, ...] = ()
    index_plans: tuple[IndexPlan, ...] = ()
    variables: dict[str, str] = field(default_factory=dict)

    def begin_row(self) -> None:
        """Reset every path cursor; call once at the start of each row."""
        for plan in self.field_plans:
            plan.resolver.begin()

    @property
    def match_plans(self) -> tuple[FieldPlan, ...]:
        return tuple(p for p in self.field_plans if p.mapping.is_match_key and not p.inert)
