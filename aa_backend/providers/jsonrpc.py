"""
Shared JSON-RPC transport for upstream bundler and paymaster endpoints.

One client per upstream is created by the application factory and handed to
the providers, so every request reuses the same httpx connection pool.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, Optional

import httpx

from ..core.errors import JsonRpcError

logger = logging.getLogger(__name__)


class JsonRpcClient:
    def __init__(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self._ids = itertools.count(1)
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def call(self, method: str, params: list[Any]) -> Any:
        request_id = next(self._ids)
        response = await self._client.post(
            self.url,
            json={"jsonrpc": "2.0", "id": request_id, "method": method, "params": params},
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise JsonRpcError(f"Malformed JSON-RPC response for {method}")
        if payload.get("error") is not None:
            error = JsonRpcError.from_payload(payload["error"])
            logger.debug("JSON-RPC %s returned error %s: %s", method, error.code, error.message)
            raise error
        return payload.get("result")

    async def aclose(self) -> None:
        await self._client.aclose()
