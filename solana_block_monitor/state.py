"""Shared application state: cache, RPC client, metrics and progress."""

from __future__ import annotations

from dataclasses import dataclass

from solana_block_monitor.cache import BlockCache
from solana_block_monitor.client import RpcClient
from solana_block_monitor.metrics import Metrics


@dataclass(eq=False)
class AppState:
    """Resources shared by the server and the synchronizer.

    ``last_processed_slot`` is the most recent slot reported by the node,
    starting at zero until the first update.
    """

    cache: BlockCache
    client: RpcClient
    metrics: Metrics
    last_processed_slot: int = 0