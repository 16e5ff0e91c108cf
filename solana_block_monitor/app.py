"""Command entry point wiring the synchronizer and the HTTP server together."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from solana_block_monitor.cache import BlockCache
from solana_block_monitor.client import RpcClient
from solana_block_monitor.config import Config, ConfigError
from solana_block_monitor.logic import MonitorLogic
from solana_block_monitor.metrics import TracingMetrics
from solana_block_monitor.server import start_server
from solana_block_monitor.state import AppState
from solana_block_monitor.synchronizer import Synchronizer

logger = logging.getLogger(__name__)


async def _serve(port: int, logic: MonitorLogic) -> None:
    try:
        await start_server(port, logic)
    except Exception as exc:
        logger.error("Server error: %s", exc)


async def run(config: Config) -> None:
    """Run the monitor until the synchronizer or the server stops."""
    cache = BlockCache(config.monitoring_depth)
    metrics = TracingMetrics()
    async with RpcClient(config.solana_rpc_url, config.solana_rpc_key) as client:
        logic = MonitorLogic(AppState(cache=cache, client=client, metrics=metrics))
        synchronizer = Synchronizer(logic, config.monitor_interval_ms, config.monitoring_depth)

        sync_task = asyncio.create_task(synchronizer.run())
        logger.info("Starting server on port %d", config.server_port)
        server_task = asyncio.create_task(_serve(config.server_port, logic))
        tasks = {sync_task: "Synchronizer", server_task: "Server"}
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                logger.error("%s task ended unexpectedly", tasks[task])
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)


def main(argv: Sequence[str] | None = None) -> int:
    """Load ``.env``, configure logging and run the monitor."""
    parser = argparse.ArgumentParser(
        prog="solana-block-monitor",
        description="Track confirmed Solana blocks and answer slot queries over HTTP.",
    )
    parser.parse_args(argv)

    try:
        config = Config.load()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        stream=sys.stdout,
        level=config.tracing_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Loaded configuration from .env file:")
    logger.info("  Solana RPC URL: %s", config.solana_rpc_url)
    logger.info("  Server Port: %d", config.server_port)
    logger.info("  Log Level: %s", config.log_level)
    logger.info("  Monitor Interval: %dms", config.monitor_interval_ms)

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    return 0