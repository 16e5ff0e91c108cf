import logging

import pytest

from solana_block_monitor.config import (
    Config,
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
    MissingVariableError,
    parse_env_line,
)
from solana_block_monitor.metrics import TRACE

KEYS = (
    "SOLANA_RPC_URL",
    "SOLANA_RPC_KEY",
    "SERVER_PORT",
    "LOG_LEVEL",
    "MONITOR_INTERVAL_MS",
    "MONITORING_DEPTH",
)

TEST_CONTENT = """
# Test configuration
SOLANA_RPC_URL=https://test-rpc.solana.com
SOLANA_RPC_KEY=test-rpc-key
SERVER_PORT=3000
LOG_LEVEL=debug
MONITOR_INTERVAL_MS=1000
MONITORING_DEPTH=50
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in KEYS:
        monkeypatch.setenv(key, "unset")
        monkeypatch.delenv(key)


def _base_environ():
    return {
        "SOLANA_RPC_URL": "https://test-rpc.solana.com",
        "SOLANA_RPC_KEY": "test-rpc-key",
        "SERVER_PORT": "3000",
        "LOG_LEVEL": "debug",
        "MONITOR_INTERVAL_MS": "1000",
        "MONITORING_DEPTH": "50",
    }


def test_load_from_env_file(tmp_path):
    path = tmp_path / "test.env"
    path.write_text(TEST_CONTENT)

    config = Config.load_from_env_file(path)
    assert config.solana_rpc_url == "https://test-rpc.solana.com"
    assert config.solana_rpc_key == "test-rpc-key"
    assert config.server_port == 3000
    assert config.log_level == "debug"
    assert config.monitor_interval_ms == 1000
    assert config.monitoring_depth == 50


def test_load_reads_dot_env_in_cwd(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text(TEST_CONTENT)
    monkeypatch.chdir(tmp_path)
    config = Config.load()
    assert config.server_port == 3000


def test_missing_file(tmp_path):
    with pytest.raises(ConfigFileNotFoundError) as info:
        Config.load_from_env_file(tmp_path / "absent.env")
    assert str(info.value).startswith("Config file not found: ")


def test_invalid_line_reports_line_number(tmp_path):
    path = tmp_path / "bad.env"
    path.write_text("# comment\nSOLANA_RPC_URL=x\nnot a pair\n")
    with pytest.raises(ConfigParseError) as info:
        Config.load_from_env_file(path)
    assert str(info.value) == "Parse error: Invalid format at line 3: not a pair"


def test_missing_variable(tmp_path):
    path = tmp_path / "partial.env"
    path.write_text("SOLANA_RPC_URL=a\nSOLANA_RPC_KEY=b\n")
    with pytest.raises(MissingVariableError) as info:
        Config.load_from_env_file(path)
    assert info.value.key == "SERVER_PORT"
    assert str(info.value) == "Missing required variable: SERVER_PORT"


@pytest.mark.parametrize("port", ["abc", "70000", "-1", ""])
def test_invalid_server_port(port):
    environ = _base_environ()
    environ["SERVER_PORT"] = port
    with pytest.raises(ConfigParseError) as info:
        Config.from_environ(environ)
    assert str(info.value) == "Parse error: Invalid SERVER_PORT value"


def test_invalid_depth_is_config_error():
    environ = _base_environ()
    environ["MONITORING_DEPTH"] = "deep"
    with pytest.raises(ConfigError):
        Config.from_environ(environ)


def test_from_environ_mapping():
    config = Config.from_environ(_base_environ())
    assert config.monitoring_depth == 50
    assert config.monitor_interval_ms == 1000


@pytest.mark.parametrize(
    "line, expected",
    [
        ("KEY=value", ("KEY", "value")),
        (" KEY = value ", ("KEY", "value")),
        ('KEY="quoted value"', ("KEY", "quoted value")),
        ("KEY='single'", ("KEY", "single")),
        ("KEY=a=b", ("KEY", "a=b")),
        ("KEY=", ("KEY", "")),
        ("=value", None),
        ("novalue", None),
    ],
)
def test_parse_env_line(line, expected):
    assert parse_env_line(line) == expected


@pytest.mark.parametrize(
    "name, level",
    [
        ("trace", TRACE),
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        ("Warn", logging.WARNING),
        ("error", logging.ERROR),
        ("verbose", logging.INFO),
    ],
)
def test_tracing_level(name, level):
    environ = _base_environ()
    environ["LOG_LEVEL"] = name
    assert Config.from_environ(environ).tracing_level == level