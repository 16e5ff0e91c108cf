# solana-block-monitor

A small service that follows a Solana cluster through its JSON-RPC
endpoint. It keeps an in-memory cache of recently confirmed block slots
and answers one question over HTTP: is this slot confirmed?

## How it works

- A **slot updater** asks the RPC node for the latest slot (at
  `confirmed` commitment) once every monitor interval. It queues the
  range of slots seen since the last check, never reaching further back
  than the monitoring depth.
- Five **history workers** take ranges off the queue and fetch the
  confirmed blocks in each one with `getBlocks`. Every confirmed slot
  they find goes into the cache. The gaps between confirmed blocks are
  turned into sub-ranges (widened to at least 100 slots, but never past
  the end of the range) and queued again, unless they are shorter than
  5 slots or end at or behind the latest slot minus the monitoring
  depth. A range whose RPC call fails is put back on the queue.
- The **HTTP server** answers `GET /isSlotConfirmed/{slot}`:
  - `200` if the slot is confirmed. A cache hit needs no RPC call; on a
    miss the node is asked directly and the cache is filled.
  - `404` if the slot is not confirmed.
  - `500` if the RPC call failed.
  - `400` if `{slot}` is not an unsigned 64-bit number.

Cache hits and misses, the latest slot, and RPC timings are written to
the log as metrics (`TracingMetrics`). Operations that take longer than
one second are logged as warnings; the most detailed timing records use
a `TRACE` level below `DEBUG`.

## Installation

```
pip install .
```

## Configuration

Settings are read from a `.env` file in the working directory. Lines
starting with `#` and blank lines are skipped. A value may be wrapped in
single or double quotes. All of these variables are required:

```
# RPC endpoint; the key is appended as a path segment
SOLANA_RPC_URL=https://solana-mainnet.example.com
SOLANA_RPC_KEY=placeholder
SERVER_PORT=3000
# trace, debug, info, warn or error (anything else means info)
LOG_LEVEL=info
MONITOR_INTERVAL_MS=1000
# how many slots back from the latest one are tracked
MONITORING_DEPTH=1000
```

Values from the file are also placed in the process environment, and
variables already set in the environment are used for any the file does
not give. A missing file, a malformed line, a missing variable or a
value that is not an unsigned number raises a `ConfigError`
(`ConfigFileNotFoundError`, `ConfigParseError` or
`MissingVariableError`). `Config.from_environ(mapping)` builds a
configuration from any mapping without reading a file.

## Running

```
solana-block-monitor
```

The command takes no options besides `--help`. If the configuration
cannot be loaded it prints the error to standard error and exits with
status 1. Otherwise logs go to standard output and the server listens on
`0.0.0.0:SERVER_PORT`. Press Ctrl+C to stop it.

```
curl -i http://localhost:3000/isSlotConfirmed/312345678
```

## Use as a library

The same pieces can be put together in code:

```python
import asyncio

from solana_block_monitor.app import run
from solana_block_monitor.config import Config

config = Config.load_from_env_file("monitor.env")
asyncio.run(run(config))
```

The parts can also be used on their own:

- `solana_block_monitor.cache.BlockCache` – thread-safe set of block
  numbers. Its capacity is rounded up to a power of two (at least 64);
  the least recently used entry is evicted once about twice the capacity
  is held.
- `solana_block_monitor.client.RpcClient` – async `get_slot()` and
  `get_blocks(start, end)`; failures raise `RpcError`. Usable as an
  async context manager.
- `solana_block_monitor.state.AppState` and
  `solana_block_monitor.logic.MonitorLogic` – the shared state and the
  cache-aware queries built on it.
- `solana_block_monitor.synchronizer.Synchronizer` – the slot updater and
  history workers; `update_slots_once()` and `process_next()` run one
  step each. `split_interval()` computes the sub-ranges left to scan.
- `solana_block_monitor.server.create_app(logic)` – an aiohttp
  application serving the endpoint, for mounting in an existing server.
- `solana_block_monitor.metrics.NoOpMetrics` – a metrics recorder that
  discards everything.

## Limitations

The cache lives in memory only and starts empty on every run; nothing is
stored on disk. Metrics are written to the log and are not exposed over
HTTP or to any metrics system. The server has only the one endpoint.

## Tests

```
pip install ".[test]"
pytest
```