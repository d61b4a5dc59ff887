"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from row_document.core.config import WriteConfig
from row_document.core.definition import OutputDefinition
from row_document.mapping.model import FieldMapping, IndexSpec
from row_document.mapping.modifier import ApplyPolicy, ModifierOperation
from row_document.persistence.attributes import InMemoryAttributeStore


@pytest.fixture
def full_definition() -> OutputDefinition:
    """A definition with every option set away from its default."""
    return OutputDefinition(
        write=WriteConfig(
            hostnames="db1:27018,db2",
            port="27019",
            use_all_replica_members=True,
            username="writer",
            password="s3cr3t pässword",
            db_name="shop",
            collection="orders",
            truncate=True,
            upsert=True,
            multi=True,
            modifier_update=True,
            batch_insert_size="250",
            connect_timeout="3000",
            socket_timeout="${SOCKET_TIMEOUT}",
            read_preference="secondaryPreferred",
            write_concern="majority",
            w_timeout="500",
            journal=True,
            write_retries="7",
            write_retry_delay="3",
        ),
        mappings=[
            FieldMapping(
                incoming_name="order_id",
                document_path="_id",
                is_match_key=True,
            ),
            FieldMapping(
                incoming_name="customer",
                document_path="customer",
                use_incoming_name_as_key=True,
                operator=ModifierOperation.SET,
            ),
            FieldMapping(
                incoming_name="quantity",
                document_path="totals.count",
                operator=ModifierOperation.INCREMENT,
                apply_policy=ApplyPolicy.UPDATE_ONLY,
            ),
            FieldMapping(
                incoming_name="line",
                document_path="lines",
                operator=ModifierOperation.PUSH,
                apply_policy=ApplyPolicy.INSERT_ONLY,
                is_json_fragment=True,
            ),
        ],
        indexes=[
            IndexSpec(field_spec="customer.name,created:-1", unique=True),
            IndexSpec(field_spec="legacy", drop=True, sparse=True),
        ],
    )


@pytest.fixture
def attribute_store() -> InMemoryAttributeStore:
    return InMemoryAttributeStore()


@pytest.fixture
def markup_dir(tmp_path: Path) -> Path:
    """Temporary directory for markup files."""
    return tmp_path / "steps"
