"""Background tracking of recent slots, scanning ranges for confirmed blocks."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

from solana_block_monitor.logic import MonitorLogic

logger = logging.getLogger(__name__)

WORKERS_COUNT = 5
INTERVAL_SIZE = 100
MIN_INTERVAL_SIZE = 5
POLL_DIVIDER = 10


@dataclass(frozen=True)
class SlotInterval:
    """Inclusive range of slots."""

    start: int
    end: int

    def size(self) -> int:
        return self.end - self.start + 1 if self.end >= self.start else 0


def split_interval(interval: SlotInterval, confirmed_blocks: Iterable[int]) -> list[SlotInterval]:
    """Return the sub-intervals of ``interval`` still to be rescanned.

    Gaps between confirmed blocks are widened to at least ``INTERVAL_SIZE``
    slots, bounded by the end of the interval.
    """
    sub_intervals = []
    current = interval.start
    for slot in confirmed_blocks:
        if slot > current:
            desired_end = min(max(slot - 1, current + INTERVAL_SIZE - 1), interval.end)
            sub_intervals.append(SlotInterval(current, desired_end))
            current = desired_end + 1
        else:
            current = slot + 1
    if current <= interval.end:
        sub_intervals.append(SlotInterval(current, interval.end))
    return sub_intervals


async def process_interval(logic: MonitorLogic, interval: SlotInterval) -> list[SlotInterval]:
    """Cache the confirmed blocks of an interval and return what remains to scan."""
    confirmed_blocks = await logic.get_blocks(interval.start, interval.end)
    await logic.query_slot_range(interval.start, interval.end)
    sub_intervals = split_interval(interval, confirmed_blocks)
    logger.info(
        "Processed interval start=%d end=%d confirmed_count=%d sub_intervals_count=%d",
        interval.start,
        interval.end,
        len(confirmed_blocks),
        len(sub_intervals),
    )
    return sub_intervals


class Synchronizer:
    """Polls the latest slot and scans recent slot ranges with worker tasks."""

    def __init__(self, logic: MonitorLogic, monitor_interval_ms: int, monitoring_depth: int) -> None:
        self.logic = logic
        self.monitor_interval_ms = monitor_interval_ms
        self.monitoring_depth = monitoring_depth
        self.queue: deque[SlotInterval] = deque()
        self._last_tracked_slot = 0

    async def update_slots_once(self) -> SlotInterval | None:
        """Fetch the latest slot and queue the newly seen range, if any."""
        try:
            latest = await self.logic.update_latest_slot()
        except Exception as exc:
            logger.error("Failed to update starting slot: %s", exc)
            return None
        logger.info("Updated latest slot start_slot=%d", latest)
        begin = max(self._last_tracked_slot + 1, max(latest - self.monitoring_depth, 0))
        interval = None
        if begin <= latest:
            interval = SlotInterval(begin, latest)
            logger.info(
                "Added interval to queue start=%d end=%d size=%d",
                interval.start,
                interval.end,
                interval.size(),
            )
            self.queue.append(interval)
        self._last_tracked_slot = latest
        return interval

    async def process_next(self) -> bool:
        """Process one queued interval; return False when the queue is empty."""
        try:
            interval = self.queue.popleft()
        except IndexError:
            return False
        logger.info(
            "Got interval from queue start=%d end=%d size=%d",
            interval.start,
            interval.end,
            interval.size(),
        )
        try:
            sub_intervals = await process_interval(self.logic, interval)
        except Exception as exc:
            logger.error(
                "Failed to process interval start=%d end=%d error=%s",
                interval.start,
                interval.end,
                exc,
            )
            self.queue.append(interval)
            return True

        horizon = max(self.logic.state.last_processed_slot - self.monitoring_depth, 0)
        for sub in sub_intervals:
            if sub.size() < MIN_INTERVAL_SIZE:
                logger.info(
                    "Sub-interval size is too small start=%d end=%d size=%d",
                    sub.start,
                    sub.end,
                    sub.size(),
                )
            elif sub.end <= horizon:
                logger.info(
                    "Sub-interval end is too far behind start=%d end=%d size=%d",
                    sub.start,
                    sub.end,
                    sub.size(),
                )
            else:
                self.queue.append(sub)
                logger.debug(
                    "Added sub-interval to queue start=%d end=%d size=%d",
                    sub.start,
                    sub.end,
                    sub.size(),
                )
        return True

    async def _slot_updater(self) -> None:
        period = self.monitor_interval_ms / 1000
        loop = asyncio.get_running_loop()
        logger.info("Slot updater started - updating every %dms", self.monitor_interval_ms)
        next_tick = loop.time()
        while True:
            await self.update_slots_once()
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            next_tick += period

    async def _worker(self, worker_id: int) -> None:
        logger.info("History worker started worker_id=%d", worker_id)
        while True:
            if await self.process_next():
                await asyncio.sleep(self.monitor_interval_ms // POLL_DIVIDER / 1000)
            else:
                logger.info("No interval to process - sleeping worker_id=%d", worker_id)
                await asyncio.sleep(self.monitor_interval_ms / 1000)

    async def _history_updater(self) -> None:
        logger.info("History updater started with %d workers", WORKERS_COUNT)
        workers = [asyncio.create_task(self._worker(i)) for i in range(WORKERS_COUNT)]
        try:
            results = await asyncio.gather(*workers, return_exceptions=True)
        finally:
            for worker in workers:
                worker.cancel()
        for result in results:
            if isinstance(result, BaseException):
                logger.error("Worker task ended unexpectedly: %s", result)

    async def run(self) -> None:
        """Run the slot updater and the history workers until one of them ends."""
        logger.info("Starting block synchronizer")
        tasks = {
            asyncio.create_task(self._slot_updater()): "Slot updater",
            asyncio.create_task(self._history_updater()): "History updater",
        }
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                logger.error("%s task ended unexpectedly", tasks[task])
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)