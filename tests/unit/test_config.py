"""Unit tests for WriteConfig option resolution."""

from __future__ import annotations

import logging

import pytest

from row_document.core.config import WriteConfig
from row_document.core.enums import ReadPreference, WriteConcernKind


class TestDefaults:
    def test_defaults(self) -> None:
        config = WriteConfig()
        assert config.hostnames == "localhost"
        assert config.port == "27017"
        assert config.batch_insert_size == "100"
        assert config.read_preference == "primary"
        assert config.write_retries == "5"
        assert config.write_retry_delay == "10"
        assert config.use_all_replica_members is False
        assert config.modifier_update is False


class TestNumericResolution:
    def test_plain_values(self) -> None:
        config = WriteConfig(batch_insert_size="20", connect_timeout="1500", write_retries="2")
        assert config.resolved_batch_size() == 20
        assert config.resolved_connect_timeout() == 1500
        assert config.resolved_write_retries() == 2

    def test_blank_falls_back(self) -> None:
        config = WriteConfig(
            batch_insert_size="",
            connect_timeout="",
            socket_timeout=" ",
            write_retries="",
            write_retry_delay="",
        )
        assert config.resolved_batch_size() == 100
        assert config.resolved_connect_timeout() is None
        assert config.resolved_socket_timeout() is None
        assert config.resolved_write_retries() == 5
        assert config.resolved_write_retry_delay() == 10

    def test_variables_resolved_at_use_time(self) -> None:
        config = WriteConfig(socket_timeout="${TIMEOUT}", write_retry_delay="%%DELAY%%")
        assert config.resolved_socket_timeout({"TIMEOUT": "900"}) == 900
        assert config.resolved_write_retry_delay({"DELAY": "4"}) == 4

    def test_unsubstituted_variable_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        config = WriteConfig(write_retries="${RETRIES}")
        with caplog.at_level(logging.WARNING, logger="row_document.core.config"):
            assert config.resolved_write_retries({}) == 5
        assert "write_retries" in caplog.text

    def test_non_positive_batch_size(self) -> None:
        assert WriteConfig(batch_insert_size="0").resolved_batch_size() == 100

    def test_w_timeout(self) -> None:
        assert WriteConfig(w_timeout="250").resolved_w_timeout() == 250
        assert WriteConfig().resolved_w_timeout() is None


class TestReadPreference:
    @pytest.mark.parametrize("token", [p.value for p in ReadPreference])
    def test_known_values(self, token: str) -> None:
        assert WriteConfig(read_preference=token).resolved_read_preference().value == token

    def test_blank_is_primary(self) -> None:
        assert WriteConfig(read_preference="").resolved_read_preference() is ReadPreference.PRIMARY

    def test_unknown_is_primary(self) -> None:
        assert WriteConfig(read_preference="fastest").resolved_read_preference() is ReadPreference.PRIMARY

    def test_case_insensitive(self) -> None:
        assert (
            WriteConfig(read_preference="SecondaryPreferred").resolved_read_preference()
            is ReadPreference.SECONDARY_PREFERRED
        )


class TestWriteConcern:
    @pytest.mark.parametrize(
        ("token", "kind"),
        [
            ("", WriteConcernKind.DEFAULT),
            ("-1", WriteConcernKind.UNACKNOWLEDGED_SILENT),
            ("0", WriteConcernKind.UNACKNOWLEDGED),
            ("1", WriteConcernKind.ACKNOWLEDGED),
            ("majority", WriteConcernKind.MAJORITY),
            ("3", WriteConcernKind.COUNT),
            ("dc:east", WriteConcernKind.TAG_SET),
        ],
    )
    def test_classification(self, token: str, kind: WriteConcernKind) -> None:
        assert WriteConfig(write_concern=token).write_concern_kind() is kind

    def test_token_passed_through(self) -> None:
        config = WriteConfig(write_concern="dc:east")
        config.write_concern_kind()
        assert config.write_concern == "dc:east"


class TestHostList:
    def test_shared_port(self) -> None:
        assert WriteConfig(hostnames="a, b", port="27018").host_list() == [("a", 27018), ("b", 27018)]

    def test_per_host_port(self) -> None:
        assert WriteConfig(hostnames="a:1000,b").host_list() == [("a", 1000), ("b", 27017)]

    def test_blank_port(self) -> None:
        assert WriteConfig(hostnames="a", port="").host_list() == [("a", 27017)]

    def test_variables(self) -> None:
        config = WriteConfig(hostnames="${HOSTS}")
        assert config.host_list({"HOSTS": "x:1,y:2"}) == [("x", 1), ("y", 2)]
