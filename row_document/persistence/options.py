"""Persisted option names and boolean tokens.

These names are read directly by other tooling; they must not change.
"""

from __future__ import annotations

TRUE_TOKEN = "Y"
FALSE_TOKEN = "N"

STEP_TAG = "step"

# Write options
HOST = "mongo_host"
PORT = "mongo_port"
USE_ALL_REPLICA_MEMBERS = "use_all_replica_members"
USER = "mongo_user"
PASSWORD = "mongo_password"
DB = "mongo_db"
COLLECTION = "mongo_collection"
BATCH_INSERT_SIZE = "batch_insert_size"
CONNECT_TIMEOUT = "connect_timeout"
SOCKET_TIMEOUT = "socket_timeout"
READ_PREFERENCE = "read_preference"
WRITE_CONCERN = "write_concern"
W_TIMEOUT = "w_timeout"
JOURNALED_WRITES = "journaled_writes"
TRUNCATE = "truncate"
UPSERT = "upsert"
MULTI = "multi"
MODIFIER_UPDATE = "modifier_update"
WRITE_RETRIES = "write_retries"
WRITE_RETRY_DELAY = "write_retry_delay"

# Field mappings
FIELDS_GROUP = "mongo_fields"
FIELD_ENTRY = "mongo_field"
INCOMING_FIELD_NAME = "incoming_field_name"
DOC_PATH = "mongo_doc_path"
USE_INCOMING_AS_KEY = "use_incoming_field_name_as_mongo_field_name"
UPDATE_MATCH_FIELD = "update_match_field"
MODIFIER_OPERATION = "modifier_update_operation"
MODIFIER_POLICY = "modifier_policy"
JSON_FIELD = "json_field"

# Index specs
INDEXES_GROUP = "mongo_indexes"
INDEX_ENTRY = "mongo_index"
PATH_TO_FIELDS = "path_to_fields"
DROP = "drop"
UNIQUE = "unique"
SPARSE = "sparse"

# Required at step level; every other option falls back to a default.
REQUIRED_FLAGS = (TRUNCATE, UPSERT, MULTI, MODIFIER_UPDATE)


def bool_token(value: bool) -> str:
    return TRUE_TOKEN if value else FALSE_TOKEN


def parse_bool_token(token: str | None, default: bool = False) -> bool:
    """``Y`` (any case) is true; anything else is false; None gives *default*."""
    if token is None or not token.strip():
        return default
    return token.strip().upper() == TRUE_TOKEN
