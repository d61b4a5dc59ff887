"""RowDocument exception hierarchy.

Every error raised by the package derives from RowDocumentError. Advisory
check results are returned as values by ValidationService, never raised.
"""

from __future__ import annotations


class RowDocumentError(Exception):
    """Base exception for all RowDocument errors."""


# --- Mapping ---


class MappingError(RowDocumentError):
    """Base for field mapping and document assembly errors."""


class PathCompilationError(MappingError):
    """Raised when a PathResolver is compiled twice or used before compiling."""

    def __init__(self, raw_path: str, detail: str) -> None:
        self.raw_path = raw_path
        super().__init__(f"Document path '{raw_path}': {detail}")


class PathCursorError(MappingError):
    """Raised when a path cursor is advanced past its last segment."""

    def __init__(self, segments: tuple[str, ...]) -> None:
        self.segments = segments
        super().__init__(f"Path cursor exhausted for '{'.'.join(segments)}'")


class IndexSpecError(MappingError):
    """Raised when an index field spec cannot be parsed."""

    def __init__(self, field_spec: str, detail: str) -> None:
        self.field_spec = field_spec
        super().__init__(f"Invalid index spec '{field_spec}': {detail}")


class ModifierPolicyError(MappingError):
    """Raised for an unknown modifier operator or apply-policy token."""

    def __init__(self, kind: str, token: str) -> None:
        self.kind = kind
        self.token = token
        super().__init__(f"Unknown {kind} '{token}'")


# --- Persistence ---


class PersistenceError(RowDocumentError):
    """Base for configuration persistence errors."""


class ConfigParseError(PersistenceError):
    """Raised when a persisted configuration is malformed or incomplete.

    A load that raises this never returns a partial definition.
    """

    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"Cannot load configuration from {source}: {detail}")


class ConfigEncodeError(PersistenceError):
    """Raised when a definition holds a value its encoding cannot represent."""

    def __init__(self, target: str, detail: str) -> None:
        self.target = target
        self.detail = detail
        super().__init__(f"Cannot save configuration as {target}: {detail}")
