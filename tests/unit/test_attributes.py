"""Unit tests for the attribute-store encoding."""

from __future__ import annotations

import pytest

from row_document.core.definition import OutputDefinition
from row_document.core.exceptions import ConfigParseError
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ApplyPolicy, ModifierOperation
from row_document.persistence.attributes import (
    InMemoryAttributeStore,
    load_attributes,
    save_attributes,
)


class TestRoundTrip:
    def test_full_definition(
        self, full_definition: OutputDefinition, attribute_store: InMemoryAttributeStore
    ) -> None:
        save_attributes(full_definition, attribute_store, "step-1")
        assert load_attributes(attribute_store, "step-1") == full_definition

    def test_default_definition(self, attribute_store: InMemoryAttributeStore) -> None:
        definition = OutputDefinition()
        save_attributes(definition, attribute_store, "s")
        assert load_attributes(attribute_store, "s") == definition

    @pytest.mark.parametrize("value", [True, False])
    def test_booleans(self, value: bool, attribute_store: InMemoryAttributeStore) -> None:
        definition = OutputDefinition(
            mappings=[FieldMapping(incoming_name="f", is_match_key=value, is_json_fragment=value)],
            indexes=[IndexSpec(field_spec="f", drop=value, unique=value, sparse=value)],
        )
        definition.write.multi = value
        definition.write.use_all_replica_members = value
        save_attributes(definition, attribute_store, "s")
        assert attribute_store.get_step_attribute_boolean("s", 0, "multi") is value
        assert load_attributes(attribute_store, "s") == definition

    def test_method_pair_on_definition(
        self, full_definition: OutputDefinition, attribute_store: InMemoryAttributeStore
    ) -> None:
        full_definition.save_attributes(attribute_store, "s")
        assert OutputDefinition.load_attributes(attribute_store, "s") == full_definition

    def test_steps_are_isolated(
        self, full_definition: OutputDefinition, attribute_store: InMemoryAttributeStore
    ) -> None:
        other = OutputDefinition(mappings=[FieldMapping(incoming_name="only")])
        save_attributes(full_definition, attribute_store, "a")
        save_attributes(other, attribute_store, "b")
        assert load_attributes(attribute_store, "a") == full_definition
        assert load_attributes(attribute_store, "b") == other


class TestLayout:
    def test_scalars_at_row_zero(
        self, full_definition: OutputDefinition, attribute_store: InMemoryAttributeStore
    ) -> None:
        save_attributes(full_definition, attribute_store, "s")
        assert attribute_store.get_step_attribute_string("s", 0, "mongo_db") == "shop"
        assert attribute_store.get_step_attribute_string("s", 0, "write_retries") == "7"

    def test_one_row_per_list_entry(
        self, full_definition: OutputDefinition, attribute_store: InMemoryAttributeStore
    ) -> None:
        save_attributes(full_definition, attribute_store, "s")
        assert attribute_store.count_nr_step_attributes("s", "incoming_field_name") == 4
        assert attribute_store.count_nr_step_attributes("s", "path_to_fields") == 2
        assert attribute_store.get_step_attribute_string("s", 2, "mongo_doc_path") == "totals.count"
        assert attribute_store.get_step_attribute_string("s", 3, "modifier_update_operation") == "$push"

    def test_password_obfuscated(
        self, full_definition: OutputDefinition, attribute_store: InMemoryAttributeStore
    ) -> None:
        save_attributes(full_definition, attribute_store, "s")
        stored = attribute_store.get_step_attribute_string("s", 0, "mongo_password")
        assert stored is not None
        assert stored.startswith("Encrypted ")

    def test_resave_drops_stale_rows(
        self, full_definition: OutputDefinition, attribute_store: InMemoryAttributeStore
    ) -> None:
        save_attributes(full_definition, attribute_store, "s")
        full_definition.mappings = full_definition.mappings[:1]
        full_definition.indexes = []
        save_attributes(full_definition, attribute_store, "s")
        loaded = load_attributes(attribute_store, "s")
        assert len(loaded.mappings) == 1
        assert loaded.indexes == []


class TestDecoding:
    def _legacy_store(self) -> InMemoryAttributeStore:
        store = InMemoryAttributeStore()
        for code in ("truncate", "upsert", "multi", "modifier_update"):
            store.save_step_attribute("old", 0, code, False)
        store.save_step_attribute("old", 0, "mongo_host", "legacy-host")
        store.save_step_attribute("old", 0, "incoming_field_name", "a")
        store.save_step_attribute("old", 0, "mongo_doc_path", "x.y")
        return store

    def test_missing_options_use_defaults(self) -> None:
        definition = load_attributes(self._legacy_store(), "old")
        assert definition.write.hostnames == "legacy-host"
        assert definition.write.write_retries == "5"
        assert definition.write.write_retry_delay == "10"
        assert definition.write.use_all_replica_members is False

    def test_missing_field_options_use_defaults(self) -> None:
        mapping = load_attributes(self._legacy_store(), "old").mappings[0]
        assert mapping.document_path == "x.y"
        assert mapping.operator is ModifierOperation.NONE
        assert mapping.apply_policy is ApplyPolicy.INSERT_AND_UPDATE
        assert mapping.is_json_fragment is False

    def test_string_boolean_tokens(self) -> None:
        store = self._legacy_store()
        store.save_step_attribute("old", 0, "upsert", "Y")
        assert load_attributes(store, "old").write.upsert is True

    def test_store_without_flags(self, attribute_store: InMemoryAttributeStore) -> None:
        attribute_store.save_step_attribute("s", 0, "mongo_host", "db1")
        with pytest.raises(ConfigParseError, match="truncate"):
            load_attributes(attribute_store, "s")

    @pytest.mark.parametrize("code", ["truncate", "upsert", "multi", "modifier_update"])
    def test_missing_required_flag(self, code: str) -> None:
        store = InMemoryAttributeStore()
        for flag in ("truncate", "upsert", "multi", "modifier_update"):
            if flag != code:
                store.save_step_attribute("old", 0, flag, True)
        store.save_step_attribute("old", 0, "mongo_host", "legacy-host")
        with pytest.raises(ConfigParseError, match=code):
            load_attributes(store, "old")

    def test_unknown_step(self, attribute_store: InMemoryAttributeStore) -> None:
        with pytest.raises(ConfigParseError, match="no attributes"):
            load_attributes(attribute_store, "missing")

    def test_unknown_policy(self) -> None:
        store = self._legacy_store()
        store.save_step_attribute("old", 0, "modifier_policy", "Never")
        with pytest.raises(ConfigParseError, match="Never"):
            load_attributes(store, "old")

    def test_corrupt_password(self) -> None:
        store = self._legacy_store()
        store.save_step_attribute("old", 0, "mongo_password", "Encrypted not-hex")
        with pytest.raises(ConfigParseError, match="mongo_password"):
            load_attributes(store, "old")
