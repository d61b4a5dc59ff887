"""Unit tests for the markup encoding."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from row_document.core.definition import OutputDefinition
from row_document.core.exceptions import ConfigEncodeError, ConfigParseError
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ApplyPolicy, ModifierOperation
from row_document.persistence.markup import decode_markup, encode_markup

MINIMAL_STEP = """
<step>
  <truncate>N</truncate>
  <upsert>Y</upsert>
  <multi>N</multi>
  <modifier_update>N</modifier_update>
  <mongo_fields>
    <mongo_field>
      <incoming_field_name>name</incoming_field_name>
      <mongo_doc_path>person</mongo_doc_path>
      <use_incoming_field_name_as_mongo_field_name>Y</use_incoming_field_name_as_mongo_field_name>
      <update_match_field>N</update_match_field>
    </mongo_field>
  </mongo_fields>
</step>
"""


class TestRoundTrip:
    def test_full_definition(self, full_definition: OutputDefinition) -> None:
        assert decode_markup(encode_markup(full_definition)) == full_definition

    def test_default_definition(self) -> None:
        definition = OutputDefinition()
        assert decode_markup(encode_markup(definition)) == definition

    def test_empty_connection_strings(self) -> None:
        definition = OutputDefinition()
        definition.write.hostnames = ""
        definition.write.port = ""
        definition.write.batch_insert_size = ""
        assert decode_markup(encode_markup(definition)) == definition

    @pytest.mark.parametrize("value", [True, False])
    def test_booleans(self, value: bool) -> None:
        definition = OutputDefinition(
            mappings=[
                FieldMapping(
                    incoming_name="f",
                    use_incoming_name_as_key=value,
                    is_match_key=value,
                    is_json_fragment=value,
                )
            ],
            indexes=[IndexSpec(field_spec="f", drop=value, unique=value, sparse=value)],
        )
        definition.write.truncate = value
        definition.write.journal = value
        definition.write.use_all_replica_members = value
        loaded = decode_markup(encode_markup(definition))
        assert loaded == definition
        assert loaded.mappings[0].is_json_fragment is value

    def test_method_pair_on_definition(self, full_definition: OutputDefinition) -> None:
        assert OutputDefinition.from_markup(full_definition.to_markup()) == full_definition

    @pytest.mark.parametrize("text", ["a\rb", "a\r\nb", "line\r"])
    def test_carriage_return_preserved(self, text: str) -> None:
        definition = OutputDefinition(mappings=[FieldMapping(incoming_name=text, document_path=text)])
        definition.write.collection = text
        loaded = decode_markup(encode_markup(definition))
        assert loaded == definition
        assert loaded.mappings[0].incoming_name == text


class TestEncoding:
    def test_boolean_tokens(self, full_definition: OutputDefinition) -> None:
        step = ET.fromstring(encode_markup(full_definition))
        assert step.findtext("truncate") == "Y"
        assert step.findtext("journaled_writes") == "Y"
        full_definition.write.truncate = False
        step = ET.fromstring(encode_markup(full_definition))
        assert step.findtext("truncate") == "N"

    def test_password_not_in_clear(self, full_definition: OutputDefinition) -> None:
        text = encode_markup(full_definition)
        assert full_definition.write.password not in text
        assert ET.fromstring(text).findtext("mongo_password").startswith("Encrypted ")

    def test_password_variable_kept(self) -> None:
        definition = OutputDefinition()
        definition.write.password = "${DB_PASSWORD}"
        step = ET.fromstring(encode_markup(definition))
        assert step.findtext("mongo_password") == "${DB_PASSWORD}"

    def test_nested_groups(self, full_definition: OutputDefinition) -> None:
        step = ET.fromstring(encode_markup(full_definition))
        fields = step.find("mongo_fields")
        assert fields is not None
        assert len(fields.findall("mongo_field")) == 4
        assert fields.find("mongo_field/modifier_update_operation").text == "N/A"
        assert len(step.findall("mongo_indexes/mongo_index")) == 2

    def test_empty_lists_omit_groups(self) -> None:
        step = ET.fromstring(encode_markup(OutputDefinition()))
        assert step.find("mongo_fields") is None
        assert step.find("mongo_indexes") is None

    @pytest.mark.parametrize("char", ["\x01", "\x0b", "\x1f", "\ufffe"])
    def test_unrepresentable_character_refused(self, char: str) -> None:
        definition = OutputDefinition(mappings=[FieldMapping(incoming_name=f"a{char}b")])
        with pytest.raises(ConfigEncodeError, match="incoming_field_name"):
            encode_markup(definition)

    def test_tab_and_newline_kept(self) -> None:
        definition = OutputDefinition(mappings=[FieldMapping(incoming_name="a\tb\nc")])
        assert decode_markup(encode_markup(definition)) == definition

    def test_empty_connection_strings_omitted(self) -> None:
        definition = OutputDefinition()
        definition.write.username = ""
        step = ET.fromstring(encode_markup(definition))
        assert step.find("mongo_user") is None
        assert step.find("connect_timeout") is not None


class TestDecoding:
    def test_missing_optional_tags_use_defaults(self) -> None:
        definition = decode_markup(MINIMAL_STEP)
        assert definition.write.write_retries == "5"
        assert definition.write.write_retry_delay == "10"
        assert definition.write.use_all_replica_members is False
        assert definition.write.resolved_write_retries() == 5
        assert definition.write.resolved_write_retry_delay() == 10
        assert definition.write.upsert is True

    def test_missing_operator_and_policy(self) -> None:
        mapping = decode_markup(MINIMAL_STEP).mappings[0]
        assert mapping.operator is ModifierOperation.NONE
        assert mapping.apply_policy is ApplyPolicy.INSERT_AND_UPDATE
        assert mapping.is_json_fragment is False
        assert mapping.use_incoming_name_as_key is True

    def test_lowercase_boolean_token(self) -> None:
        definition = decode_markup(MINIMAL_STEP.replace("<upsert>Y", "<upsert>y"))
        assert definition.write.upsert is True

    def test_step_inside_document(self) -> None:
        wrapped = f"<transformation><steps>{MINIMAL_STEP}</steps></transformation>"
        assert decode_markup(wrapped) == decode_markup(MINIMAL_STEP)

    def test_malformed_xml(self) -> None:
        with pytest.raises(ConfigParseError, match="malformed"):
            decode_markup("<step><truncate>")

    def test_no_step_element(self) -> None:
        with pytest.raises(ConfigParseError, match="no <step>"):
            decode_markup("<other/>")

    def test_missing_required_flag(self) -> None:
        with pytest.raises(ConfigParseError, match="modifier_update"):
            decode_markup(MINIMAL_STEP.replace("<modifier_update>N</modifier_update>", ""))

    def test_field_without_incoming_name(self) -> None:
        text = MINIMAL_STEP.replace("<incoming_field_name>name</incoming_field_name>", "")
        with pytest.raises(ConfigParseError, match="incoming_field_name"):
            decode_markup(text)

    def test_unknown_operator(self) -> None:
        text = MINIMAL_STEP.replace(
            "</mongo_field>",
            "<modifier_update_operation>$rename</modifier_update_operation></mongo_field>",
        )
        with pytest.raises(ConfigParseError, match=r"\$rename"):
            decode_markup(text)

    def test_index_without_path(self) -> None:
        text = MINIMAL_STEP.replace(
            "</step>", "<mongo_indexes><mongo_index><drop>Y</drop></mongo_index></mongo_indexes></step>"
        )
        with pytest.raises(ConfigParseError, match="path_to_fields"):
            decode_markup(text)

    def test_corrupt_password(self) -> None:
        text = MINIMAL_STEP.replace("</step>", "<mongo_password>Encrypted zz</mongo_password></step>")
        with pytest.raises(ConfigParseError, match="mongo_password"):
            decode_markup(text)

    def test_plain_password_accepted(self) -> None:
        text = MINIMAL_STEP.replace("</step>", "<mongo_password>plain</mongo_password></step>")
        assert decode_markup(text).write.password == "plain"
