"""Row-to-document assembly.

DocumentAssembler is the reference consumer of a WritePlan: it resets
every path cursor at the start of each row, then walks the cursors to
build nested dicts, query filters and modifier update bodies. It performs
no I/O; handing the results to a document store is the writer's job.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from typing import Any

from row_document.core.exceptions import MappingError
from row_document.mapping.plan import FieldPlan, WritePlan


def _field_value(plan: FieldPlan, value: Any) -> Any:
    """Return the value to store, parsing JSON fragments."""
    if not plan.mapping.is_json_fragment:
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError) as e:
        raise MappingError(
            f"Field '{plan.mapping.incoming_name}' does not hold a valid JSON fragment: {e}"
        ) from e


def _dotted(plan: FieldPlan) -> str:
    """Dotted key for the current row's cursor position."""
    keys = plan.resolver.cursor.remaining()
    if plan.mapping.use_incoming_name_as_key:
        keys = keys + (plan.mapping.incoming_name,)
    return ".".join(keys)


class DocumentAssembler:
    """Builds documents from rows according to a compiled WritePlan.

    Args:
        plan: A plan compiled for this assembler's worker only.
    """

    def __init__(self, plan: WritePlan) -> None:
        self._plan = plan

    @property
    def plan(self) -> WritePlan:
        return self._plan

    def _active(
        self, row: dict[str, Any], plans: Iterable[FieldPlan] | None = None
    ) -> Iterator[tuple[FieldPlan, Any]]:
        """Yield (plan, value) for non-inert mappings with a non-null value."""
        for plan in self._plan.field_plans if plans is None else plans:
            if plan.inert:
                continue
            value = row.get(plan.mapping.incoming_name)
            if value is None:
                continue
            yield plan, _field_value(plan, value)

    def _place(self, document: dict[str, Any], plan: FieldPlan, value: Any) -> None:
        cursor = plan.resolver.cursor
        terminal = plan.mapping.incoming_name if plan.mapping.use_incoming_name_as_key else None
        container = document
        while len(cursor) > (0 if terminal is not None else 1):
            segment = cursor.advance()
            child = container.setdefault(segment, {})
            if not isinstance(child, dict):
                raise MappingError(
                    f"Field '{plan.mapping.incoming_name}' path '{plan.mapping.document_path}' "
                    f"passes through non-document value at '{segment}'"
                )
            container = child
        key = terminal if terminal is not None else cursor.advance()
        container[key] = value

    def insert_document(self, row: dict[str, Any]) -> dict[str, Any]:
        """Whole document built from every mapped value of *row*."""
        self._plan.begin_row()
        document: dict[str, Any] = {}
        for plan, value in self._active(row):
            self._place(document, plan, value)
        return document

    def match_query(self, row: dict[str, Any]) -> dict[str, Any]:
        """Filter built from the match-key mappings, keyed by dotted path."""
        self._plan.begin_row()
        return {_dotted(plan): value for plan, value in self._active(row, self._plan.match_plans)}

    def modifier_update(self, row: dict[str, Any], is_insert: bool) -> dict[str, Any]:
        """Operator-grouped update body for one upsert branch.

        Args:
            row: The incoming row.
            is_insert: True when no matching document exists yet.

        Raises:
            MappingError: If the plan is not in modifier-update mode.
        """
        policy = self._plan.policy
        if not policy.modifier_update:
            raise MappingError("modifier_update() requires modifier update mode")

        self._plan.begin_row()
        body: dict[str, dict[str, Any]] = {}
        applicable = [p for p in self._plan.field_plans if policy.applies(p.mapping, is_insert)]
        for plan, value in self._active(row, applicable):
            operation = policy.effective_operation(plan.mapping)
            body.setdefault(operation.value, {})[_dotted(plan)] = value
        return body

    def map_one(self, row: dict[str, Any]) -> dict[str, Any]:
        return self.insert_document(row)

    def map_many(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [self.map_one(row) for row in rows]
