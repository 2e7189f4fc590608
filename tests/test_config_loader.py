"""Tests for config file loading, saving and env overrides."""

import json
from pathlib import Path

import pytest

from dotrpc.config.loader import (
    camel_to_snake,
    convert_keys,
    convert_to_camel,
    load_config,
    save_config,
    snake_to_camel,
)
from dotrpc.config.schema import Config


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "absent.json")
    assert cfg.server.strict_version is False
    assert cfg.server.allow_get_calls is False
    assert cfg.http.port == 8080
    assert cfg.client.timeout_seconds == 10.0
    assert cfg.logging.level == "INFO"


def test_load_camel_case_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "server": {"strictVersion": True, "allowGetCalls": True},
                "client": {"timeoutSeconds": 2.5, "headers": {"X-Api-Key": "k"}},
                "logging": {"level": "DEBUG", "fileName": "rpc"},
            }
        )
    )
    cfg = load_config(path)
    assert cfg.server.strict_version is True
    assert cfg.server.allow_get_calls is True
    assert cfg.client.timeout_seconds == 2.5
    assert cfg.client.headers == {"X-Api-Key": "k"}
    assert cfg.logging.file_name == "rpc"


def test_save_writes_camel_case_and_round_trips(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    cfg = Config()
    cfg.http.port = 9100
    cfg.client.headers = {"X-Trace_Id": "1"}
    save_config(cfg, path)

    raw = json.loads(path.read_text())
    assert raw["http"]["port"] == 9100
    assert "timeoutSeconds" in raw["client"]
    assert raw["client"]["headers"] == {"X-Trace_Id": "1"}

    loaded = load_config(path)
    assert loaded.http.port == 9100
    assert loaded.client.headers == {"X-Trace_Id": "1"}


@pytest.mark.parametrize("content", ["{not json", '{"logging": {"level": "LOUD"}}'])
def test_invalid_file_raises_value_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(content)
    with pytest.raises(ValueError, match="Failed to load config"):
        load_config(path)


def test_env_overrides_defaults(monkeypatch) -> None:
    monkeypatch.setenv("DOTRPC_HTTP__PORT", "9001")
    monkeypatch.setenv("DOTRPC_SERVER__STRICT_VERSION", "true")
    cfg = Config()
    assert cfg.http.port == 9001
    assert cfg.server.strict_version is True


def test_key_conversion_helpers() -> None:
    assert camel_to_snake("allowGetCalls") == "allow_get_calls"
    assert snake_to_camel("timeout_seconds") == "timeoutSeconds"
    assert convert_keys({"a": [{"fileName": "x"}]}) == {"a": [{"file_name": "x"}]}
    assert convert_to_camel({"file_name": "x", "headers": {"x_y": "1"}}) == {"fileName": "x", "headers": {"x_y": "1"}}
