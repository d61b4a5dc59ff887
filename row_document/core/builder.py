"""Output definition DSL builder.

Provides a fluent builder for authoring an OutputDefinition in code::

    definition = (
        output("shop", "orders")
        .hosts("db1:27017,db2")
        .upsert()
        .match_key("order_id", "_id", use_incoming_name=False)
        .field("total", "totals.amount")
        .modifier("sku", "items", ModifierOperation.PUSH, ApplyPolicy.UPDATE_ONLY)
        .index("order_id:1,created:-1", unique=True)
        .build()
    )
"""

from __future__ import annotations

from row_document.core.config import WriteConfig
from row_document.core.definition import OutputDefinition
from row_document.core.exceptions import IndexSpecError
from row_document.core.variables import has_variables
from row_document.mapping.index import parse_index_fields
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ApplyPolicy, ModifierOperation


def output(db_name: str = "", collection: str = "") -> OutputDefinitionBuilder:
    """Entry point for the output definition DSL."""
    return OutputDefinitionBuilder(db_name, collection)


class OutputDefinitionBuilder:
    """Fluent builder for OutputDefinition values."""

    def __init__(self, db_name: str, collection: str) -> None:
        self._options: dict[str, object] = {"db_name": db_name, "collection": collection}
        self._mappings: list[FieldMapping] = []
        self._indexes: list[IndexSpec] = []

    def hosts(self, hostnames: str, port: int | str | None = None) -> OutputDefinitionBuilder:
        self._options["hostnames"] = hostnames
        if port is not None:
            self._options["port"] = str(port)
        return self

    def credentials(self, username: str, password: str) -> OutputDefinitionBuilder:
        self._options["username"] = username
        self._options["password"] = password
        return self

    def option(self, name: str, value: object) -> OutputDefinitionBuilder:
        """Set any WriteConfig option by attribute name."""
        if name not in WriteConfig.model_fields:
            raise ValueError(f"Unknown write option '{name}'")
        self._options[name] = value
        return self

    def truncate(self, enabled: bool = True) -> OutputDefinitionBuilder:
        self._options["truncate"] = enabled
        return self

    def upsert(self, enabled: bool = True, multi: bool = False) -> OutputDefinitionBuilder:
        self._options["upsert"] = enabled
        self._options["multi"] = multi
        return self

    def modifier_update(self, enabled: bool = True) -> OutputDefinitionBuilder:
        """Switch to modifier-update mode (implies upsert)."""
        self._options["modifier_update"] = enabled
        if enabled:
            self._options["upsert"] = True
        return self

    def field(
        self,
        incoming_name: str,
        document_path: str = "",
        use_incoming_name: bool | None = None,
        json_fragment: bool = False,
    ) -> OutputDefinitionBuilder:
        """Map a row value into the document body.

        ``use_incoming_name`` defaults to True when no path is given, so
        ``field("name")`` stores the value under the key ``name``.
        """
        if use_incoming_name is None:
            use_incoming_name = not document_path
        self._mappings.append(
            FieldMapping(
                incoming_name=incoming_name,
                document_path=document_path,
                use_incoming_name_as_key=use_incoming_name,
                is_json_fragment=json_fragment,
            )
        )
        return self

    def match_key(
        self,
        incoming_name: str,
        document_path: str = "",
        use_incoming_name: bool | None = None,
    ) -> OutputDefinitionBuilder:
        """Map a row value that identifies the target document(s)."""
        if use_incoming_name is None:
            use_incoming_name = not document_path
        self._mappings.append(
            FieldMapping(
                incoming_name=incoming_name,
                document_path=document_path,
                use_incoming_name_as_key=use_incoming_name,
                is_match_key=True,
            )
        )
        return self

    def modifier(
        self,
        incoming_name: str,
        document_path: str,
        operator: ModifierOperation,
        apply_policy: ApplyPolicy = ApplyPolicy.INSERT_AND_UPDATE,
        use_incoming_name: bool = False,
    ) -> OutputDefinitionBuilder:
        """Map a row value applied through a modifier operator."""
        self._mappings.append(
            FieldMapping(
                incoming_name=incoming_name,
                document_path=document_path,
                use_incoming_name_as_key=use_incoming_name,
                operator=operator,
                apply_policy=apply_policy,
            )
        )
        return self

    def index(
        self,
        field_spec: str,
        unique: bool = False,
        sparse: bool = False,
        drop: bool = False,
    ) -> OutputDefinitionBuilder:
        self._indexes.append(IndexSpec(field_spec=field_spec, drop=drop, unique=unique, sparse=sparse))
        return self

    def build(self) -> OutputDefinition:
        """Validate index specs and return the definition.

        Specs containing variables are only checked at compile time.
        """
        for spec in self._indexes:
            if has_variables(spec.field_spec):
                continue
            if not parse_index_fields(spec.field_spec):
                raise IndexSpecError(spec.field_spec, "no index terms")
        return OutputDefinition(
            write=WriteConfig(**self._options),  # type: ignore[arg-type]
            mappings=list(self._mappings),
            indexes=list(self._indexes),
        )
