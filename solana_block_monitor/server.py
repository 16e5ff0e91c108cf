"""HTTP endpoint answering whether a slot holds a confirmed block."""

from __future__ import annotations

import asyncio
import logging
import re
import time

from aiohttp import web

from solana_block_monitor.logic import MonitorLogic

logger = logging.getLogger(__name__)

LOGIC_KEY = web.AppKey("logic", MonitorLogic)

_SLOT_PATTERN = re.compile(r"\+?[0-9]+")
_U64_MAX = 2**64 - 1


def _parse_slot(raw: str) -> int | None:
    if not _SLOT_PATTERN.fullmatch(raw):
        return None
    slot = int(raw)
    return slot if slot <= _U64_MAX else None


async def is_slot_confirmed(request: web.Request) -> web.Response:
    """Answer 200 for a confirmed slot, 404 for an unconfirmed one, 500 on error."""
    slot = _parse_slot(request.match_info["slot"])
    if slot is None:
        return web.Response(status=400, text="Invalid slot")

    logic = request.app[LOGIC_KEY]
    started = time.perf_counter()
    logger.debug("Checking if slot is confirmed slot=%d", slot)

    try:
        block = await logic.get_block(slot)
    except Exception as exc:
        logger.error("Failed to check slot %d error=%s", slot, exc)
        status = 500
    else:
        if block is not None:
            logger.debug("Slot %d confirmed", slot)
            status = 200
        else:
            logger.debug("Slot %d not confirmed", slot)
            status = 404

    elapsed = time.perf_counter() - started
    logic.state.metrics.record_is_slot_confirmed_elapsed(elapsed)
    logger.debug(
        "Slot confirmation check completed slot=%d elapsed_ms=%d", slot, int(elapsed * 1000)
    )
    return web.Response(status=status)


def create_app(logic: MonitorLogic) -> web.Application:
    """Build the web application serving ``/isSlotConfirmed/{slot}``."""
    app = web.Application()
    app[LOGIC_KEY] = logic
    app.router.add_get("/isSlotConfirmed/{slot}", is_slot_confirmed)
    return app


async def start_server(port: int, logic: MonitorLogic) -> None:
    """Serve on all interfaces at the given port until cancelled."""
    runner = web.AppRunner(create_app(logic))
    await runner.setup()
    try:
        site = web.TCPSite(runner, "0.0.0.0", port)
        await site.start()
        logger.info("Server starting port=%d", port)
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()