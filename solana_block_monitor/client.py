"""JSON-RPC client for a Solana node reached through a keyed endpoint."""

from __future__ import annotations

import itertools
from typing import Any

import aiohttp

_COMMITMENT = {"commitment": "confirmed"}


class RpcError(Exception):
    """Raised when an RPC request fails or returns an error."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class RpcClient:
    """Asynchronous client querying slots and blocks at confirmed commitment."""

    def __init__(
        self,
        rpc_url: str,
        key: str,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._url = f"{rpc_url}/{key}"
        self._session = session
        self._owns_session = session is None
        self._ids = itertools.count(1)

    @property
    def url(self) -> str:
        """The full endpoint URL, including the key."""
        return self._url

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or (self._owns_session and self._session.closed):
            self._session = aiohttp.ClientSession()
        return self._session

    async def _call(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        session = self._get_session()
        try:
            async with session.post(self._url, json=payload) as response:
                if response.status != 200:
                    text = await response.text()
                    raise RpcError(f"HTTP status {response.status}: {text}")
                body = await response.json(content_type=None)
        except aiohttp.ClientError as exc:
            raise RpcError(f"request failed: {exc}") from exc
        except ValueError as exc:
            raise RpcError(f"invalid JSON response: {exc}") from exc

        if not isinstance(body, dict):
            raise RpcError("malformed response: expected a JSON object")
        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                code = error.get("code")
                message = error.get("message", "unknown error")
                raise RpcError(f"RPC error {code}: {message}", code if _is_int(code) else None)
            raise RpcError(f"RPC error: {error}")
        if "result" not in body:
            raise RpcError("malformed response: missing result")
        return body["result"]

    async def get_slot(self) -> int:
        """Return the latest confirmed slot."""
        result = await self._call("getSlot", [dict(_COMMITMENT)])
        if not _is_int(result):
            raise RpcError(f"unexpected getSlot result: {result!r}")
        return result

    async def get_blocks(self, start_slot: int, end_slot: int) -> list[int]:
        """Return the confirmed blocks between two slots, inclusive."""
        result = await self._call("getBlocks", [start_slot, end_slot, dict(_COMMITMENT)])
        if not isinstance(result, list) or not all(_is_int(item) for item in result):
            raise RpcError(f"unexpected getBlocks result: {result!r}")
        return result

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> RpcClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()