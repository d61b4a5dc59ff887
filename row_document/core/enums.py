"""Option enumerations shared by configuration and validation."""

from __future__ import annotations

from enum import Enum


class ReadPreference(Enum):
    """Cluster member roles eligible to serve reads."""

    PRIMARY = "primary"
    PRIMARY_PREFERRED = "primaryPreferred"
    SECONDARY = "secondary"
    SECONDARY_PREFERRED = "secondaryPreferred"
    NEAREST = "nearest"


class WriteConcernKind(Enum):
    """Classification of a write-concern token.

    The token itself is always passed through to the writer unchanged.
    """

    DEFAULT = "default"  # empty token
    UNACKNOWLEDGED_SILENT = "-1"
    UNACKNOWLEDGED = "0"
    ACKNOWLEDGED = "1"
    MAJORITY = "majority"
    COUNT = "count"  # N > 1
    TAG_SET = "tag_set"


class Severity(Enum):
    """Severity of an advisory check result."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"
