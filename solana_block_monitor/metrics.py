"""Metrics recorders that report through the logging system."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

SLOW_OPERATION_THRESHOLD_MS = 1000

_performance_log = logging.getLogger(f"{__name__}.performance")
_slow_log = logging.getLogger(f"{__name__}.performance.slow")
_timing_log = logging.getLogger(f"{__name__}.timing")
_blockchain_log = logging.getLogger(f"{__name__}.blockchain")
_slot_tracking_log = logging.getLogger(f"{__name__}.slot_tracking")
_rpc_log = logging.getLogger(f"{__name__}.rpc")
_cache_log = logging.getLogger(f"{__name__}.cache")
_cache_tracking_log = logging.getLogger(f"{__name__}.cache_tracking")


def classify_performance(elapsed_ms: int) -> str:
    """Label an operation duration as ``slow``, ``moderate`` or ``fast``."""
    if elapsed_ms > SLOW_OPERATION_THRESHOLD_MS:
        return "slow"
    if elapsed_ms > SLOW_OPERATION_THRESHOLD_MS // 2:
        return "moderate"
    return "fast"


def _timestamp_ms() -> int:
    return time.time_ns() // 1_000_000


def _emit(logger: logging.Logger, level: int, message: str, **fields: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    rendered = " ".join(f"{key}={value}" for key, value in fields.items())
    logger.log(level, "%s %s", message, rendered, extra={"metric_fields": fields})


class Metrics(ABC):
    """Receiver of monitoring measurements. Durations are in seconds."""

    @abstractmethod
    def record_latest_slot(self, slot: int) -> None: ...

    @abstractmethod
    def record_get_blocks_elapsed(self, elapsed: float) -> None: ...

    @abstractmethod
    def record_is_slot_confirmed_elapsed(self, elapsed: float) -> None: ...

    @abstractmethod
    def record_cache_hit(self, hit: bool) -> None: ...


class TracingMetrics(Metrics):
    """Metrics written as structured log records."""

    def _log_performance(self, operation: str, elapsed: float) -> None:
        elapsed_ns = max(0, round(elapsed * 1_000_000_000))
        elapsed_micros = elapsed_ns // 1_000
        elapsed_ms = elapsed_ns // 1_000_000
        performance = classify_performance(elapsed_ms)

        if elapsed_ms > SLOW_OPERATION_THRESHOLD_MS:
            _emit(
                _slow_log,
                logging.WARNING,
                "Slow operation detected",
                operation=operation,
                elapsed_ms=elapsed_ms,
                elapsed_micros=elapsed_micros,
                threshold_ms=SLOW_OPERATION_THRESHOLD_MS,
                performance=performance,
            )
        else:
            _emit(
                _performance_log,
                logging.DEBUG,
                "Operation completed",
                operation=operation,
                elapsed_ms=elapsed_ms,
                elapsed_micros=elapsed_micros,
                performance=performance,
            )

        _emit(
            _timing_log,
            TRACE,
            "Detailed timing information",
            operation=operation,
            elapsed_ns=elapsed_ns,
            elapsed_micros=elapsed_micros,
            elapsed_ms=elapsed_ms,
            timestamp=_timestamp_ms(),
        )

    def _record_operation(self, operation: str, elapsed: float) -> None:
        elapsed_ms = max(0, round(elapsed * 1_000_000_000)) // 1_000_000
        _emit(
            _rpc_log,
            logging.INFO,
            f"RPC {operation} operation completed",
            operation=operation,
            elapsed_ms=elapsed_ms,
            metric_type="operation_duration",
        )
        self._log_performance(operation, elapsed)

    def record_latest_slot(self, slot: int) -> None:
        _emit(
            _blockchain_log,
            logging.INFO,
            "Latest slot recorded",
            slot=slot,
            metric_type="latest_slot",
            timestamp=_timestamp_ms(),
        )
        _emit(
            _slot_tracking_log,
            TRACE,
            "Slot tracking update",
            slot=slot,
            event="slot_update",
            timestamp=_timestamp_ms(),
        )

    def record_get_blocks_elapsed(self, elapsed: float) -> None:
        self._record_operation("get_blocks", elapsed)

    def record_is_slot_confirmed_elapsed(self, elapsed: float) -> None:
        self._record_operation("is_slot_confirmed", elapsed)

    def record_cache_hit(self, hit: bool) -> None:
        cache_result = "hit" if hit else "miss"
        _emit(
            _cache_log,
            logging.INFO,
            "Cache operation recorded",
            cache_result=cache_result,
            hit=hit,
            metric_type="cache_performance",
            timestamp=_timestamp_ms(),
        )
        _emit(
            _cache_tracking_log,
            TRACE,
            "Cache access tracking",
            hit=hit,
            result=cache_result,
            event="cache_access",
            timestamp=_timestamp_ms(),
        )


class NoOpMetrics(Metrics):
    """Metrics that discard everything."""

    def record_latest_slot(self, slot: int) -> None:
        pass

    def record_get_blocks_elapsed(self, elapsed: float) -> None:
        pass

    def record_is_slot_confirmed_elapsed(self, elapsed: float) -> None:
        pass

    def record_cache_hit(self, hit: bool) -> None:
        pass