"""Nested markup (XML) encoding of an OutputDefinition.

Layout::

    <step>
      <mongo_host>localhost</mongo_host>
      ...
      <mongo_fields>
        <mongo_field>
          <incoming_field_name>id</incoming_field_name>
          ...
        </mongo_field>
      </mongo_fields>
      <mongo_indexes>
        <mongo_index>...</mongo_index>
      </mongo_indexes>
    </step>

Booleans are written as ``Y``/``N``. The password is obfuscated before it
is written and restored on read. Connection strings that are empty are
omitted; every other option is always written. Carriage returns are
written as character references so that they survive parsing; values
holding characters XML cannot carry are refused with ConfigEncodeError.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET

from row_document.core.config import DEFAULT_WRITE_RETRIES, DEFAULT_WRITE_RETRY_DELAY, WriteConfig
from row_document.core.definition import OutputDefinition
from row_document.core.encryption import (
    decrypt_password_if_encrypted,
    encrypt_password_if_not_using_variables,
)
from row_document.core.exceptions import ConfigEncodeError, ConfigParseError, ModifierPolicyError
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ApplyPolicy, ModifierOperation
from row_document.persistence import options as opt

logger = logging.getLogger(__name__)

_SOURCE = "markup"

# Characters XML 1.0 cannot carry, even as character references.
_INVALID_XML_CHARS = re.compile("[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def _add(parent: ET.Element, tag: str, value: str | bool) -> None:
    child = ET.SubElement(parent, tag)
    text = opt.bool_token(value) if isinstance(value, bool) else value
    if text:
        invalid = _INVALID_XML_CHARS.search(text)
        if invalid is not None:
            raise ConfigEncodeError(
                _SOURCE, f"<{tag}> holds character {invalid.group()!r} that XML cannot represent"
            )
        child.text = text


def _add_if_set(parent: ET.Element, tag: str, value: str) -> None:
    if value:
        _add(parent, tag, value)


def _tag_value(node: ET.Element, tag: str) -> str | None:
    """Text of the first *tag* child; ``""`` for an empty tag, None if absent."""
    child = node.find(tag)
    if child is None:
        return None
    return child.text or ""


def _required(node: ET.Element, tag: str) -> str:
    value = _tag_value(node, tag)
    if value is None:
        raise ConfigParseError(_SOURCE, f"<{node.tag}> is missing required <{tag}>")
    return value


def encode_markup(definition: OutputDefinition) -> str:
    """Serialize *definition* to a ``<step>`` XML fragment."""
    write = definition.write
    step = ET.Element(opt.STEP_TAG)

    _add_if_set(step, opt.HOST, write.hostnames)
    _add_if_set(step, opt.PORT, write.port)
    _add(step, opt.USE_ALL_REPLICA_MEMBERS, write.use_all_replica_members)
    _add_if_set(step, opt.USER, write.username)
    _add_if_set(step, opt.PASSWORD, encrypt_password_if_not_using_variables(write.password))
    _add_if_set(step, opt.DB, write.db_name)
    _add_if_set(step, opt.COLLECTION, write.collection)
    _add_if_set(step, opt.BATCH_INSERT_SIZE, write.batch_insert_size)

    _add(step, opt.CONNECT_TIMEOUT, write.connect_timeout)
    _add(step, opt.SOCKET_TIMEOUT, write.socket_timeout)
    _add(step, opt.READ_PREFERENCE, write.read_preference)
    _add(step, opt.WRITE_CONCERN, write.write_concern)
    _add(step, opt.W_TIMEOUT, write.w_timeout)
    _add(step, opt.JOURNALED_WRITES, write.journal)

    _add(step, opt.TRUNCATE, write.truncate)
    _add(step, opt.UPSERT, write.upsert)
    _add(step, opt.MULTI, write.multi)
    _add(step, opt.MODIFIER_UPDATE, write.modifier_update)
    _add(step, opt.WRITE_RETRIES, write.write_retries)
    _add(step, opt.WRITE_RETRY_DELAY, write.write_retry_delay)

    if definition.mappings:
        group = ET.SubElement(step, opt.FIELDS_GROUP)
        for mapping in definition.mappings:
            entry = ET.SubElement(group, opt.FIELD_ENTRY)
            _add(entry, opt.INCOMING_FIELD_NAME, mapping.incoming_name)
            _add(entry, opt.DOC_PATH, mapping.document_path)
            _add(entry, opt.USE_INCOMING_AS_KEY, mapping.use_incoming_name_as_key)
            _add(entry, opt.UPDATE_MATCH_FIELD, mapping.is_match_key)
            _add(entry, opt.MODIFIER_OPERATION, mapping.operator.value)
            _add(entry, opt.MODIFIER_POLICY, mapping.apply_policy.value)
            _add(entry, opt.JSON_FIELD, mapping.is_json_fragment)

    if definition.indexes:
        group = ET.SubElement(step, opt.INDEXES_GROUP)
        for index in definition.indexes:
            entry = ET.SubElement(group, opt.INDEX_ENTRY)
            _add(entry, opt.PATH_TO_FIELDS, index.field_spec)
            _add(entry, opt.DROP, index.drop)
            _add(entry, opt.UNIQUE, index.unique)
            _add(entry, opt.SPARSE, index.sparse)

    ET.indent(step, space="  ")
    logger.debug(
        "Encoded markup: %d field(s), %d index(es)",
        len(definition.mappings),
        len(definition.indexes),
    )
    # A raw carriage return would be normalised to a newline on read.
    return ET.tostring(step, encoding="unicode").replace("\r", "&#13;")


def _find_step(text: str) -> ET.Element:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ConfigParseError(_SOURCE, f"malformed XML: {e}") from e
    if root.tag == opt.STEP_TAG:
        return root
    step = root.find(f".//{opt.STEP_TAG}")
    if step is None:
        raise ConfigParseError(_SOURCE, f"no <{opt.STEP_TAG}> element found")
    return step


def _decode_write(step: ET.Element) -> WriteConfig:
    flags = {tag: opt.parse_bool_token(_required(step, tag)) for tag in opt.REQUIRED_FLAGS}

    try:
        password = decrypt_password_if_encrypted(_tag_value(step, opt.PASSWORD))
    except ValueError as e:
        raise ConfigParseError(_SOURCE, f"cannot restore <{opt.PASSWORD}>: {e}") from e

    return WriteConfig(
        hostnames=_tag_value(step, opt.HOST) or "",
        port=_tag_value(step, opt.PORT) or "",
        use_all_replica_members=opt.parse_bool_token(_tag_value(step, opt.USE_ALL_REPLICA_MEMBERS)),
        username=_tag_value(step, opt.USER) or "",
        password=password,
        db_name=_tag_value(step, opt.DB) or "",
        collection=_tag_value(step, opt.COLLECTION) or "",
        batch_insert_size=_tag_value(step, opt.BATCH_INSERT_SIZE) or "",
        connect_timeout=_tag_value(step, opt.CONNECT_TIMEOUT) or "",
        socket_timeout=_tag_value(step, opt.SOCKET_TIMEOUT) or "",
        read_preference=_tag_value(step, opt.READ_PREFERENCE) or "",
        write_concern=_tag_value(step, opt.WRITE_CONCERN) or "",
        w_timeout=_tag_value(step, opt.W_TIMEOUT) or "",
        journal=opt.parse_bool_token(_tag_value(step, opt.JOURNALED_WRITES)),
        truncate=flags[opt.TRUNCATE],
        upsert=flags[opt.UPSERT],
        multi=flags[opt.MULTI],
        modifier_update=flags[opt.MODIFIER_UPDATE],
        write_retries=_tag_value(step, opt.WRITE_RETRIES) or str(DEFAULT_WRITE_RETRIES),
        write_retry_delay=_tag_value(step, opt.WRITE_RETRY_DELAY) or str(DEFAULT_WRITE_RETRY_DELAY),
    )


def _decode_mapping(entry: ET.Element) -> FieldMapping:
    try:
        operator = ModifierOperation.from_token(_tag_value(entry, opt.MODIFIER_OPERATION))
        policy = ApplyPolicy.from_token(_tag_value(entry, opt.MODIFIER_POLICY))
    except ModifierPolicyError as e:
        raise ConfigParseError(_SOURCE, str(e)) from e

    return FieldMapping(
        incoming_name=_required(entry, opt.INCOMING_FIELD_NAME),
        document_path=_tag_value(entry, opt.DOC_PATH) or "",
        use_incoming_name_as_key=opt.parse_bool_token(_tag_value(entry, opt.USE_INCOMING_AS_KEY)),
        is_match_key=opt.parse_bool_token(_tag_value(entry, opt.UPDATE_MATCH_FIELD)),
        operator=operator,
        apply_policy=policy,
        is_json_fragment=opt.parse_bool_token(_tag_value(entry, opt.JSON_FIELD)),
    )


def _decode_index(entry: ET.Element) -> IndexSpec:
    return IndexSpec(
        field_spec=_required(entry, opt.PATH_TO_FIELDS),
        drop=opt.parse_bool_token(_tag_value(entry, opt.DROP)),
        unique=opt.parse_bool_token(_tag_value(entry, opt.UNIQUE)),
        sparse=opt.parse_bool_token(_tag_value(entry, opt.SPARSE)),
    )


def decode_markup(text: str) -> OutputDefinition:
    """Rebuild an OutputDefinition from its markup encoding.

    *text* may be a bare ``<step>`` element or a document containing one.

    Raises:
        ConfigParseError: If the XML is malformed or required structure is
            missing. No partial definition is returned.
    """
    step = _find_step(text)
    write = _decode_write(step)

    mappings: list[FieldMapping] = []
    group = step.find(opt.FIELDS_GROUP)
    if group is not None:
        mappings = [_decode_mapping(entry) for entry in group.findall(opt.FIELD_ENTRY)]

    indexes: list[IndexSpec] = []
    group = step.find(opt.INDEXES_GROUP)
    if group is not None:
        indexes = [_decode_index(entry) for entry in group.findall(opt.INDEX_ENTRY)]

    logger.debug("Decoded markup: %d field(s), %d index(es)", len(mappings), len(indexes))
    return OutputDefinition(write=write, mappings=mappings, indexes=indexes)
