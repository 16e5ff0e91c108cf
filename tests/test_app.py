import asyncio
import logging
import socket

import pytest

from solana_block_monitor.app import main, run
from solana_block_monitor.config import Config

ENV_KEYS = (
    "SOLANA_RPC_URL",
    "SOLANA_RPC_KEY",
    "SERVER_PORT",
    "LOG_LEVEL",
    "MONITOR_INTERVAL_MS",
    "MONITORING_DEPTH",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_main_without_env_file_fails(clean_env, capsys):
    assert main([]) == 1
    assert "Config file not found" in capsys.readouterr().err


def test_main_with_malformed_env_file_fails(clean_env, capsys):
    (clean_env / ".env").write_text("garbage\n", encoding="utf-8")
    assert main([]) == 1
    assert "Invalid format at line 1: garbage" in capsys.readouterr().err


def test_main_with_missing_variable_fails(clean_env, capsys):
    (clean_env / ".env").write_text("SOLANA_RPC_URL=http://localhost\n", encoding="utf-8")
    assert main([]) == 1
    assert "Missing required variable: SOLANA_RPC_KEY" in capsys.readouterr().err


def test_main_rejects_unknown_arguments(clean_env):
    with pytest.raises(SystemExit) as excinfo:
        main(["--unknown"])
    assert excinfo.value.code == 2


@pytest.mark.asyncio
async def test_run_stops_when_server_cannot_bind(caplog):
    caplog.set_level(logging.INFO)
    occupier = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    occupier.bind(("0.0.0.0", 0))
    occupier.listen()
    port = occupier.getsockname()[1]
    try:
        config = Config(
            solana_rpc_url="http://127.0.0.1:9",
            solana_rpc_key="placeholder",
            server_port=port,
            log_level="info",
            monitor_interval_ms=50,
            monitoring_depth=10,
        )
        await asyncio.wait_for(run(config), 5)
    finally:
        occupier.close()
    assert "Server error" in caplog.text
    assert "Server task ended unexpectedly" in caplog.text