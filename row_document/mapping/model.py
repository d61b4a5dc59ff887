"""Declarative mapping entities.

FieldMapping and IndexSpec are Pydantic models: they are edited at design
time, persisted by the codecs in ``row_document.persistence`` and compared
field-for-field after a round trip.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel

from row_document.mapping.index import IndexTerm, parse_index_fields
from row_document.mapping.modifier import ApplyPolicy, ModifierOperation


class FieldMapping(BaseModel):
    """Maps one incoming row value to a path in the target document.

    Attributes:
        incoming_name: Name of the value in the incoming row.
        document_path: Dot-separated path; may contain variables.
        use_incoming_name_as_key: Append ``incoming_name`` as the terminal
            key instead of taking it from the path.
        is_match_key: The value goes into the upsert query, not the body.
        operator: Modifier operator, used only in modifier-update mode.
        apply_policy: Upsert branch(es) the operator applies to.
        is_json_fragment: The value is JSON text spliced in at the path.
    """

    incoming_name: str = ""
    document_path: str = ""
    use_incoming_name_as_key: bool = False
    is_match_key: bool = False
    operator: ModifierOperation = ModifierOperation.NONE
    apply_policy: ApplyPolicy = ApplyPolicy.INSERT_AND_UPDATE
    is_json_fragment: bool = False


class IndexSpec(BaseModel):
    """An index to create (or drop) on the target collection."""

    field_spec: str = ""
    drop: bool = False
    unique: bool = False
    sparse: bool = False

    def terms(self, variables: Mapping[str, str] | None = None) -> tuple[IndexTerm, ...]:
        """Parse ``field_spec`` into ordered ``IndexTerm`` values."""
        return parse_index_fields(self.field_spec, variables)

    def __str__(self) -> str:
        return f"{self.field_spec} (unique = {self.unique} sparse = {self.sparse})"
