"""Write configuration.

WriteConfig is a Pydantic model holding connection, batching, timeout,
write-concern and retry options. Numeric options are kept as strings,
exactly as persisted, because they may hold variable references; they are
resolved and parsed at use time through the ``resolved_*`` helpers, which
fall back to the documented defaults instead of failing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import BaseModel

from row_document.core.enums import ReadPreference, WriteConcernKind
from row_document.core.variables import substitute

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 27017
DEFAULT_BATCH_SIZE = 100
DEFAULT_WRITE_RETRIES = 5
DEFAULT_WRITE_RETRY_DELAY = 10  # seconds


def _resolve_int(
    option: str,
    raw: str,
    variables: Mapping[str, str] | None,
    default: int | None,
) -> int | None:
    """Substitute and parse an integer option, falling back to *default*."""
    value = substitute(raw, variables).strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(
            "Option %s has non-numeric value %r; using default %r", option, value, default
        )
        return default


class WriteConfig(BaseModel):
    """Connection and write options for the document store writer."""

    hostnames: str = DEFAULT_HOST
    port: str = str(DEFAULT_PORT)
    use_all_replica_members: bool = False
    username: str = ""
    password: str = ""  # plaintext, in memory only
    db_name: str = ""
    collection: str = ""
    truncate: bool = False
    upsert: bool = False
    multi: bool = False
    modifier_update: bool = False
    batch_insert_size: str = str(DEFAULT_BATCH_SIZE)
    connect_timeout: str = ""
    socket_timeout: str = ""
    read_preference: str = ReadPreference.PRIMARY.value
    write_concern: str = ""
    w_timeout: str = ""
    journal: bool = False
    write_retries: str = str(DEFAULT_WRITE_RETRIES)
    write_retry_delay: str = str(DEFAULT_WRITE_RETRY_DELAY)

    def resolved_batch_size(self, variables: Mapping[str, str] | None = None) -> int:
        size = _resolve_int("batch_insert_size", self.batch_insert_size, variables, DEFAULT_BATCH_SIZE)
        return size if size and size > 0 else DEFAULT_BATCH_SIZE

    def resolved_connect_timeout(self, variables: Mapping[str, str] | None = None) -> int | None:
        """Connect timeout in milliseconds; None means never time out."""
        return _resolve_int("connect_timeout", self.connect_timeout, variables, None)

    def resolved_socket_timeout(self, variables: Mapping[str, str] | None = None) -> int | None:
        """Socket timeout in milliseconds; None means never time out."""
        return _resolve_int("socket_timeout", self.socket_timeout, variables, None)

    def resolved_w_timeout(self, variables: Mapping[str, str] | None = None) -> int | None:
        """Replication wait in milliseconds; None means the driver default."""
        return _resolve_int("w_timeout", self.w_timeout, variables, None)

    def resolved_write_retries(self, variables: Mapping[str, str] | None = None) -> int:
        retries = _resolve_int("write_retries", self.write_retries, variables, DEFAULT_WRITE_RETRIES)
        return DEFAULT_WRITE_RETRIES if retries is None else retries

    def resolved_write_retry_delay(self, variables: Mapping[str, str] | None = None) -> int:
        delay = _resolve_int(
            "write_retry_delay", self.write_retry_delay, variables, DEFAULT_WRITE_RETRY_DELAY
        )
        return DEFAULT_WRITE_RETRY_DELAY if delay is None else delay

    def resolved_read_preference(
        self, variables: Mapping[str, str] | None = None
    ) -> ReadPreference:
        value = substitute(self.read_preference, variables).strip()
        if not value:
            return ReadPreference.PRIMARY
        for preference in ReadPreference:
            if preference.value.lower() == value.lower():
                return preference
        logger.warning("Unknown read preference %r; using primary", value)
        return ReadPreference.PRIMARY

    def write_concern_kind(self, variables: Mapping[str, str] | None = None) -> WriteConcernKind:
        """Classify the write-concern token without interpreting it further."""
        value = substitute(self.write_concern, variables).strip()
        if not value:
            return WriteConcernKind.DEFAULT
        if value == "majority":
            return WriteConcernKind.MAJORITY
        try:
            count = int(value)
        except ValueError:
            return WriteConcernKind.TAG_SET
        if count < 0:
            return WriteConcernKind.UNACKNOWLEDGED_SILENT
        if count == 0:
            return WriteConcernKind.UNACKNOWLEDGED
        if count == 1:
            return WriteConcernKind.ACKNOWLEDGED
        return WriteConcernKind.COUNT

    def host_list(self, variables: Mapping[str, str] | None = None) -> list[tuple[str, int]]:
        """Split ``hostnames`` into ``(host, port)`` pairs.

        A ``host:port`` entry keeps its own port; bare hosts use the shared
        ``port`` option (27017 when blank).
        """
        shared_port = _resolve_int("port", self.port, variables, DEFAULT_PORT) or DEFAULT_PORT
        hosts: list[tuple[str, int]] = []
        for entry in substitute(self.hostnames, variables).split(","):
            entry = entry.strip()
            if not entry:
                continue
            if ":" in entry:
                host, _, port_str = entry.rpartition(":")
                port = _resolve_int("port", port_str, None, shared_port) or shared_port
                hosts.append((host.strip(), port))
            else:
                hosts.append((entry, shared_port))
        return hosts
