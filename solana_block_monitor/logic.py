"""Block and slot queries backed by the cache, the RPC client and metrics."""

from __future__ import annotations

import logging
import time

from solana_block_monitor.state import AppState

logger = logging.getLogger(__name__)


class MonitorLogic:
    """Core operations of the monitor, recording metrics as they run."""

    def __init__(self, state: AppState) -> None:
        self.state = state

    async def get_latest_slot(self) -> int:
        """Fetch the latest confirmed slot from the node."""
        try:
            slot = await self.state.client.get_slot()
        except Exception as exc:
            logger.warning("Failed to get latest slot error=%s", exc)
            raise
        self.state.metrics.record_latest_slot(slot)
        logger.debug("Retrieved latest slot slot=%d", slot)
        return slot

    async def get_block(self, slot: int) -> int | None:
        """Return the slot if it holds a confirmed block, otherwise None."""
        cache = self.state.cache
        metrics = self.state.metrics
        if cache.contains(slot):
            metrics.record_cache_hit(True)
            return slot
        metrics.record_cache_hit(False)

        started = time.perf_counter()
        blocks = await self.state.client.get_blocks(slot, slot)
        metrics.record_get_blocks_elapsed(time.perf_counter() - started)

        if slot in blocks:
            cache.insert(slot)
            return slot
        return None

    async def get_blocks(self, start_slot: int, end_slot: int) -> list[int]:
        """Return the confirmed blocks in the inclusive slot range."""
        started = time.perf_counter()
        try:
            blocks = await self.state.client.get_blocks(start_slot, end_slot)
        except Exception as exc:
            elapsed = time.perf_counter() - started
            self.state.metrics.record_get_blocks_elapsed(elapsed)
            logger.warning(
                "Failed to get blocks range start_slot=%d end_slot=%d elapsed_ms=%d error=%s",
                start_slot,
                end_slot,
                int(elapsed * 1000),
                exc,
            )
            raise
        elapsed = time.perf_counter() - started
        self.state.metrics.record_get_blocks_elapsed(elapsed)
        logger.debug(
            "Retrieved blocks range start_slot=%d end_slot=%d block_count=%d elapsed_ms=%d",
            start_slot,
            end_slot,
            len(blocks),
            int(elapsed * 1000),
        )
        return blocks

    async def update_latest_slot(self) -> int:
        """Fetch the latest slot and store it as the last processed slot."""
        current_slot = await self.get_latest_slot()
        self.state.last_processed_slot = current_slot
        logger.info("Initialized synchronizer starting from slot current_slot=%d", current_slot)
        return current_slot

    async def query_slot_range(self, start_slot: int, end_slot: int) -> int:
        """Cache the confirmed blocks of a range; return how many were new."""
        confirmed_blocks = await self.get_blocks(start_slot, end_slot)
        cache = self.state.cache
        inserted_count = sum(
            1 for block in confirmed_blocks if not cache.contains(block) and cache.insert(block)
        )
        if inserted_count:
            logger.info(
                "Added confirmed blocks to cache start_slot=%d end_slot=%d "
                "inserted_count=%d cache_size=%d",
                start_slot,
                end_slot,
                inserted_count,
                len(cache),
            )
        return inserted_count