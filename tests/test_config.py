"""Tests for environment-driven Config and the adapter factories."""

import pytest

from adapters.http.usage_fetcher import HttpxUsageFetcher
from adapters.local.json_file_credential_store import JsonFileCredentialStore
from adapters.local.log_balance_sink import LogBalanceSink
from adapters.local.memory_credential_store import InMemoryCredentialStore
from adapters.local.noop_balance_sink import NoOpBalanceSink
from config import (
    DEFAULT_MAX_CONCURRENCY, DEFAULT_REQUEST_TIMEOUT, DEFAULT_USAGE_ENDPOINT,
    Config, create_infra_adapters, create_usage_fetcher,
)

pytestmark = pytest.mark.unit

ENV_VARS = [
    "USAGE_ENDPOINT", "REQUEST_TIMEOUT_SECONDS", "MAX_CONCURRENCY", "CREDENTIAL_STORE",
    "CREDENTIAL_STORE_PATH", "REPORT_BALANCES", "ALLOWED_ORIGINS", "DISPLAY_UTC_OFFSET_HOURS",
]


@pytest.fixture
def fresh_config(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    def _load(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return Config.reload()

    yield _load
    monkeypatch.undo()
    Config.reload()


class TestConfig:
    def test_defaults(self, fresh_config):
        cfg = fresh_config()

        assert cfg.usage_endpoint == DEFAULT_USAGE_ENDPOINT
        assert cfg.request_timeout == DEFAULT_REQUEST_TIMEOUT
        assert cfg.max_concurrency == DEFAULT_MAX_CONCURRENCY
        assert cfg.display_utc_offset_hours == 8.0
        assert cfg.credential_store == "json"
        assert cfg.report_balances is True
        assert cfg.allowed_origins == []

    def test_overrides(self, fresh_config):
        cfg = fresh_config(
            REQUEST_TIMEOUT_SECONDS="2.5",
            MAX_CONCURRENCY="0",
            REPORT_BALANCES="false",
            ALLOWED_ORIGINS="http://a.test, http://b.test",
            CREDENTIAL_STORE="MEMORY",
        )

        assert cfg.request_timeout == 2.5
        assert cfg.max_concurrency == 0
        assert cfg.report_balances is False
        assert cfg.allowed_origins == ["http://a.test", "http://b.test"]
        assert cfg.credential_store == "memory"

    def test_as_dict_has_no_store_path(self, fresh_config):
        assert "credential_store_path" not in fresh_config().as_dict()


class TestFactories:
    def test_json_store_and_log_sink(self, fresh_config, tmp_path):
        cfg = fresh_config(CREDENTIAL_STORE_PATH=str(tmp_path / "keys.json"))
        adapters = create_infra_adapters(cfg)

        assert isinstance(adapters["credential_store"], JsonFileCredentialStore)
        assert isinstance(adapters["balance_sink"], LogBalanceSink)

    def test_memory_store_and_noop_sink(self, fresh_config):
        adapters = create_infra_adapters(fresh_config(CREDENTIAL_STORE="memory", REPORT_BALANCES="0"))

        assert isinstance(adapters["credential_store"], InMemoryCredentialStore)
        assert isinstance(adapters["balance_sink"], NoOpBalanceSink)

    def test_unknown_store(self, fresh_config):
        with pytest.raises(ValueError, match="Unknown CREDENTIAL_STORE"):
            create_infra_adapters(fresh_config(CREDENTIAL_STORE="redis"))

    def test_usage_fetcher(self, fresh_config):
        assert isinstance(create_usage_fetcher(fresh_config()), HttpxUsageFetcher)
