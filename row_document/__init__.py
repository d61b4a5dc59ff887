"""RowDocument - row-to-document path mapping and modifier policy model."""

from __future__ import annotations

from row_document.core.builder import OutputDefinitionBuilder, output
from row_document.core.capabilities import Configurable, Persistable, Validatable
from row_document.core.config import WriteConfig
from row_document.core.definition import OutputDefinition
from row_document.core.enums import ReadPreference, Severity, WriteConcernKind
from row_document.core.exceptions import (
    ConfigEncodeError,
    ConfigParseError,
    IndexSpecError,
    MappingError,
    ModifierPolicyError,
    PathCompilationError,
    PathCursorError,
    PersistenceError,
    RowDocumentError,
)
from row_document.core.validation import CheckResult, MessageCatalog, ValidationService
from row_document.core.variables import VariableSpace, substitute
from row_document.mapping import (
    ApplyPolicy,
    DocumentAssembler,
    FieldMapping,
    IndexSpec,
    IndexTerm,
    ModifierOperation,
    ModifierPolicy,
    PathCursor,
    PathResolver,
    WritePlan,
    compile_path,
    parse_index_fields,
)
from row_document.persistence import (
    ConfigStore,
    InMemoryAttributeStore,
    SqliteAttributeStore,
    decode_markup,
    encode_markup,
    load_attributes,
    save_attributes,
)

__all__ = [
    # Definition
    "OutputDefinition",
    "OutputDefinitionBuilder",
    "output",
    "WriteConfig",
    "Configurable",
    "Persistable",
    "Validatable",
    # Mapping
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
    "WritePlan",
    "DocumentAssembler",
    # Persistence
    "ConfigStore",
    "encode_markup",
    "decode_markup",
    "save_attributes",
    "load_attributes",
    "InMemoryAttributeStore",
    "SqliteAttributeStore",
    # Validation
    "ValidationService",
    "MessageCatalog",
    "CheckResult",
    # Variables
    "VariableSpace",
    "substitute",
    # Enums
    "ReadPreference",
    "WriteConcernKind",
    "Severity",
    # Exceptions
    "RowDocumentError",
    "MappingError",
    "PathCompilationError",
    "PathCursorError",
    "IndexSpecError",
    "ModifierPolicyError",
    "PersistenceError",
    "ConfigParseError",
    "ConfigEncodeError",
]
