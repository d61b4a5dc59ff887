"""Output step definition aggregate.

OutputDefinition owns the WriteConfig, the ordered field mappings and the
index specs. It is edited by a single author at design time, deep-cloned
once per worker at run start, and compiled by each clone into its own
WritePlan so that no path cursor is ever shared between workers.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from row_document.core.config import WriteConfig
from row_document.core.validation import CheckResult, MessageCatalog, ValidationService
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ModifierPolicy
from row_document.mapping.path import PathResolver
from row_document.mapping.plan import FieldPlan, IndexPlan, WritePlan

if TYPE_CHECKING:
    from row_document.persistence.attributes import AttributeStore

logger = logging.getLogger(__name__)


class OutputDefinition(BaseModel):
    """Aggregate of write options, field mappings and index specs.

    Implements the Configurable, Persistable and Validatable capabilities.
    Loading is done through the ``from_markup`` / ``load_attributes``
    class methods.
    """

    write: WriteConfig = Field(default_factory=WriteConfig)
    mappings: list[FieldMapping] = Field(default_factory=list)
    indexes: list[IndexSpec] = Field(default_factory=list)

    # --- Configurable ---

    def set_default(self) -> None:
        self.write = WriteConfig()
        self.mappings = []
        self.indexes = []

    def clone(self) -> OutputDefinition:
        return self.model_copy(deep=True)

    def compile(self, variables: Mapping[str, str] | None = None) -> WritePlan:
        """Substitute variables and compile every path once.

        The returned plan owns fresh PathResolvers; compile a clone per
        worker rather than sharing one plan.
        """
        field_plans = []
        for mapping in self.mappings:
            resolver = PathResolver(mapping.document_path)
            resolver.compile(variables)
            plan = FieldPlan(mapping=mapping, resolver=resolver)
            if plan.inert:
                logger.debug("Field mapping %r addresses no document key", mapping.incoming_name)
            field_plans.append(plan)

        index_plans = [IndexPlan(spec=spec, terms=spec.terms(variables)) for spec in self.indexes]

        logger.debug(
            "Compiled write plan: %d field(s), %d index(es)", len(field_plans), len(index_plans)
        )
        return WritePlan(
            write=self.write,
            policy=ModifierPolicy(self.write.modifier_update),
            field_plans=tuple(field_plans),
            index_plans=tuple(index_plans),
            variables=dict(variables or {}),
        )

    def worker_plans(
        self, workers: int, variables: Mapping[str, str] | None = None
    ) -> list[WritePlan]:
        """One independent plan per worker, each compiled from its own clone."""
        return [self.clone().compile(variables) for _ in range(workers)]

    # --- Persistable ---

    def to_markup(self) -> str:
        from row_document.persistence.markup import encode_markup

        return encode_markup(self)

    @classmethod
    def from_markup(cls, text: str) -> OutputDefinition:
        from row_document.persistence.markup import decode_markup

        return decode_markup(text)

    def save_attributes(self, store: AttributeStore, step_id: str) -> None:
        from row_document.persistence.attributes import save_attributes

        save_attributes(self, store, step_id)

    @classmethod
    def load_attributes(cls, store: AttributeStore, step_id: str) -> OutputDefinition:
        from row_document.persistence.attributes import load_attributes

        return load_attributes(store, step_id)

    # --- Validatable ---

    def check(
        self,
        has_upstream_schema: bool,
        upstream_row_count: int,
        has_input_hops: bool,
        catalog: MessageCatalog | None = None,
    ) -> list[CheckResult]:
        return ValidationService(catalog).check(
            has_upstream_schema, upstream_row_count, has_input_hops
        )
