"""Flat attribute-store encoding of an OutputDefinition.

Every value is stored under ``(step_id, nr, code)``. Scalar options use
``nr = 0``; list entries use one ``nr`` per element. On reload the number
of ``incoming_field_name`` (resp. ``path_to_fields``) attributes decides
how many field mappings (resp. index specs) exist.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Protocol, runtime_checkable

from row_document.core.config import DEFAULT_WRITE_RETRIES, DEFAULT_WRITE_RETRY_DELAY, WriteConfig
from row_document.core.definition import OutputDefinition
from row_document.core.encryption import (
    decrypt_password_if_encrypted,
    encrypt_password_if_not_using_variables,
)
from row_document.core.exceptions import ConfigParseError, ModifierPolicyError
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ApplyPolicy, ModifierOperation
from row_document.persistence import options as opt

logger = logging.getLogger(__name__)

AttributeValue = str | bool | int

_SOURCE = "attribute store"


@runtime_checkable
class AttributeStore(Protocol):
    """Flat ``(step_id, nr, code) -> value`` store."""

    def save_step_attribute(self, step_id: str, nr: int, code: str, value: AttributeValue) -> None:
        """Store one attribute, replacing any previous value."""
        ...

    def get_step_attribute_string(self, step_id: str, nr: int, code: str) -> str | None:
        """Return the attribute as a string, or None if absent."""
        ...

    def get_step_attribute_boolean(
        self, step_id: str, nr: int, code: str, default: bool = False
    ) -> bool:
        """Return the attribute as a boolean, or *default* if absent."""
        ...

    def count_nr_step_attributes(self, step_id: str, code: str) -> int:
        """Number of entries stored for *code* under *step_id*."""
        ...

    def delete_step_attributes(self, step_id: str) -> None:
        """Remove every attribute of *step_id*."""
        ...

    def has_step(self, step_id: str) -> bool:
        """True if at least one attribute exists for *step_id*."""
        ...


def _as_string(value: AttributeValue) -> str:
    if isinstance(value, bool):
        return opt.bool_token(value)
    return str(value)


class InMemoryAttributeStore:
    """Dict-backed AttributeStore."""

    def __init__(self) -> None:
        self._attributes: dict[tuple[str, int, str], AttributeValue] = {}

    def save_step_attribute(self, step_id: str, nr: int, code: str, value: AttributeValue) -> None:
        self._attributes[(step_id, nr, code)] = value

    def get_step_attribute_string(self, step_id: str, nr: int, code: str) -> str | None:
        value = self._attributes.get((step_id, nr, code))
        return None if value is None else _as_string(value)

    def get_step_attribute_boolean(
        self, step_id: str, nr: int, code: str, default: bool = False
    ) -> bool:
        value = self._attributes.get((step_id, nr, code))
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return opt.parse_bool_token(_as_string(value), default)

    def count_nr_step_attributes(self, step_id: str, code: str) -> int:
        return sum(1 for (sid, _, c) in self._attributes if sid == step_id and c == code)

    def delete_step_attributes(self, step_id: str) -> None:
        for key in [k for k in self._attributes if k[0] == step_id]:
            del self._attributes[key]

    def has_step(self, step_id: str) -> bool:
        return any(sid == step_id for (sid, _, _) in self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)


_CREATE_ATTRIBUTE_TABLE = """
CREATE TABLE IF NOT EXISTS step_attribute (
    id_step   TEXT    NOT NULL,
    nr        INTEGER NOT NULL,
    code      TEXT    NOT NULL,
    value_num INTEGER,
    value_str TEXT,
    PRIMARY KEY (id_step, nr, code)
)
"""


class SqliteAttributeStore:
    """AttributeStore persisted in a SQLite ``step_attribute`` table.

    Booleans are stored as ``Y``/``N`` in ``value_str``; integers in
    ``value_num``.

    Args:
        database: Path to the database file, or ``":memory:"``.
    """

    def __init__(self, database: Path | str = ":memory:") -> None:
        self._conn = sqlite3.connect(str(database))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute(_CREATE_ATTRIBUTE_TABLE)
        self._conn.commit()

    def save_step_attribute(self, step_id: str, nr: int, code: str, value: AttributeValue) -> None:
        value_num = value if isinstance(value, int) and not isinstance(value, bool) else None
        value_str = None if value_num is not None else _as_string(value)
        self._conn.execute(
            "INSERT OR REPLACE INTO step_attribute (id_step, nr, code, value_num, value_str) "
            "VALUES (:id_step, :nr, :code, :value_num, :value_str)",
            {
                "id_step": step_id,
                "nr": nr,
                "code": code,
                "value_num": value_num,
                "value_str": value_str,
            },
        )
        self._conn.commit()

    def _fetch(self, step_id: str, nr: int, code: str) -> sqlite3.Row | None:
        cursor = self._conn.execute(
            "SELECT value_num, value_str FROM step_attribute "
            "WHERE id_step = :id_step AND nr = :nr AND code = :code",
            {"id_step": step_id, "nr": nr, "code": code},
        )
        return cursor.fetchone()

    def get_step_attribute_string(self, step_id: str, nr: int, code: str) -> str | None:
        row = self._fetch(step_id, nr, code)
        if row is None:
            return None
        if row["value_num"] is not None:
            return str(row["value_num"])
        return row["value_str"] if row["value_str"] is not None else ""

    def get_step_attribute_boolean(
        self, step_id: str, nr: int, code: str, default: bool = False
    ) -> bool:
        value = self.get_step_attribute_string(step_id, nr, code)
        return opt.parse_bool_token(value, default)

    def count_nr_step_attributes(self, step_id: str, code: str) -> int:
        cursor = self._conn.execute(
            "SELECT COUNT(*) FROM step_attribute WHERE id_step = :id_step AND code = :code",
            {"id_step": step_id, "code": code},
        )
        return int(cursor.fetchone()[0])

    def delete_step_attributes(self, step_id: str) -> None:
        self._conn.execute("DELETE FROM step_attribute WHERE id_step = :id_step", {"id_step": step_id})
        self._conn.commit()

    def has_step(self, step_id: str) -> bool:
        cursor = self._conn.execute(
            "SELECT 1 FROM step_attribute WHERE id_step = :id_step LIMIT 1", {"id_step": step_id}
        )
        return cursor.fetchone() is not None

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SqliteAttributeStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def save_attributes(definition: OutputDefinition, store: AttributeStore, step_id: str) -> None:
    """Write *definition* into *store* under *step_id*.

    Previous attributes of the step are removed first so that a shorter
    mapping list does not leave stale rows behind.
    """
    write = definition.write
    store.delete_step_attributes(step_id)

    def _put(code: str, value: AttributeValue, nr: int = 0) -> None:
        store.save_step_attribute(step_id, nr, code, value)

    def _put_if_set(code: str, value: str) -> None:
        if value:
            _put(code, value)

    _put_if_set(opt.HOST, write.hostnames)
    _put_if_set(opt.PORT, write.port)
    _put(opt.USE_ALL_REPLICA_MEMBERS, write.use_all_replica_members)
    _put_if_set(opt.USER, write.username)
    _put_if_set(opt.PASSWORD, encrypt_password_if_not_using_variables(write.password))
    _put_if_set(opt.DB, write.db_name)
    _put_if_set(opt.COLLECTION, write.collection)
    _put_if_set(opt.BATCH_INSERT_SIZE, write.batch_insert_size)

    _put(opt.CONNECT_TIMEOUT, write.connect_timeout)
    _put(opt.SOCKET_TIMEOUT, write.socket_timeout)
    _put(opt.READ_PREFERENCE, write.read_preference)
    _put(opt.WRITE_CONCERN, write.write_concern)
    _put(opt.W_TIMEOUT, write.w_timeout)
    _put(opt.JOURNALED_WRITES, write.journal)

    _put(opt.TRUNCATE, write.truncate)
    _put(opt.UPSERT, write.upsert)
    _put(opt.MULTI, write.multi)
    _put(opt.MODIFIER_UPDATE, write.modifier_update)
    _put(opt.WRITE_RETRIES, write.write_retries)
    _put(opt.WRITE_RETRY_DELAY, write.write_retry_delay)

    for nr, mapping in enumerate(definition.mappings):
        _put(opt.INCOMING_FIELD_NAME, mapping.incoming_name, nr)
        _put(opt.DOC_PATH, mapping.document_path, nr)
        _put(opt.USE_INCOMING_AS_KEY, mapping.use_incoming_name_as_key, nr)
        _put(opt.UPDATE_MATCH_FIELD, mapping.is_match_key, nr)
        _put(opt.MODIFIER_OPERATION, mapping.operator.value, nr)
        _put(opt.MODIFIER_POLICY, mapping.apply_policy.value, nr)
        _put(opt.JSON_FIELD, mapping.is_json_fragment, nr)

    for nr, index in enumerate(definition.indexes):
        _put(opt.PATH_TO_FIELDS, index.field_spec, nr)
        _put(opt.DROP, index.drop, nr)
        _put(opt.UNIQUE, index.unique, nr)
        _put(opt.SPARSE, index.sparse, nr)

    logger.debug(
        "Saved step %r: %d field(s), %d index(es)",
        step_id,
        len(definition.mappings),
        len(definition.indexes),
    )


def load_attributes(store: AttributeStore, step_id: str) -> OutputDefinition:
    """Rebuild the OutputDefinition stored under *step_id*.

    Raises:
        ConfigParseError: If the step has no attributes, a required flag is
            missing, a token is unknown or the password cannot be restored.
    """
    if not store.has_step(step_id):
        raise ConfigParseError(_SOURCE, f"no attributes stored for step '{step_id}'")

    def _str(code: str, nr: int = 0) -> str:
        return store.get_step_attribute_string(step_id, nr, code) or ""

    def _bool(code: str, nr: int = 0) -> bool:
        return store.get_step_attribute_boolean(step_id, nr, code)

    for code in opt.REQUIRED_FLAGS:
        if store.get_step_attribute_string(step_id, 0, code) is None:
            raise ConfigParseError(_SOURCE, f"step '{step_id}' is missing required '{code}'")

    try:
        password = decrypt_password_if_encrypted(_str(opt.PASSWORD))
    except ValueError as e:
        raise ConfigParseError(_SOURCE, f"cannot restore '{opt.PASSWORD}': {e}") from e

    write = WriteConfig(
        hostnames=_str(opt.HOST),
        port=_str(opt.PORT),
        use_all_replica_members=_bool(opt.USE_ALL_REPLICA_MEMBERS),
        username=_str(opt.USER),
        password=password,
        db_name=_str(opt.DB),
        collection=_str(opt.COLLECTION),
        batch_insert_size=_str(opt.BATCH_INSERT_SIZE),
        connect_timeout=_str(opt.CONNECT_TIMEOUT),
        socket_timeout=_str(opt.SOCKET_TIMEOUT),
        read_preference=_str(opt.READ_PREFERENCE),
        write_concern=_str(opt.WRITE_CONCERN),
        w_timeout=_str(opt.W_TIMEOUT),
        journal=_bool(opt.JOURNALED_WRITES),
        truncate=_bool(opt.TRUNCATE),
        upsert=_bool(opt.UPSERT),
        multi=_bool(opt.MULTI),
        modifier_update=_bool(opt.MODIFIER_UPDATE),
        write_retries=_str(opt.WRITE_RETRIES) or str(DEFAULT_WRITE_RETRIES),
        write_retry_delay=_str(opt.WRITE_RETRY_DELAY) or str(DEFAULT_WRITE_RETRY_DELAY),
    )

    mappings: list[FieldMapping] = []
    for nr in range(store.count_nr_step_attributes(step_id, opt.INCOMING_FIELD_NAME)):
        try:
            operator = ModifierOperation.from_token(_str(opt.MODIFIER_OPERATION, nr))
            policy = ApplyPolicy.from_token(_str(opt.MODIFIER_POLICY, nr))
        except ModifierPolicyError as e:
            raise ConfigParseError(_SOURCE, f"field {nr}: {e}") from e
        mappings.append(
            FieldMapping(
                incoming_name=_str(opt.INCOMING_FIELD_NAME, nr),
                document_path=_str(opt.DOC_PATH, nr),
                use_incoming_name_as_key=_bool(opt.USE_INCOMING_AS_KEY, nr),
                is_match_key=_bool(opt.UPDATE_MATCH_FIELD, nr),
                operator=operator,
                apply_policy=policy,
                is_json_fragment=_bool(opt.JSON_FIELD, nr),
            )
        )

    indexes = [
        IndexSpec(
            field_spec=_str(opt.PATH_TO_FIELDS, nr),
            drop=_bool(opt.DROP, nr),
            unique=_bool(opt.UNIQUE, nr),
            sparse=_bool(opt.SPARSE, nr),
        )
        for nr in range(store.count_nr_step_attributes(step_id, opt.PATH_TO_FIELDS))
    ]

    logger.debug("Loaded step %r: %d field(s), %d index(es)", step_id, len(mappings), len(indexes))
    return OutputDefinition(write=write, mappings=mappings, indexes=indexes)
