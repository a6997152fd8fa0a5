"""
HTTP client for the backend's UserOperation API.

Implements the same sponsor / submit / get_receipt calls as
ProviderUserOperationService, so a UserOperationFlow can run against a remote
backend instead of talking to the bundler and paymaster directly.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import settings
from .core.errors import UpstreamError
from .core.execution.userop import UnsignedUserOperation, UserOperation, UserOperationReceipt

logger = logging.getLogger(__name__)


class BackendApiClient:
    timeout_s = 30

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "BackendApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, failure: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError(f"{failure}: {exc}") from exc

        if not isinstance(payload, dict):
            raise UpstreamError(f"{failure}: unexpected response body")
        if response.is_error or not payload.get("success"):
            error = payload.get("error") or {}
            message = error.get("message") or response.reason_phrase
            raise UpstreamError(f"{failure}: {message}")
        return payload["data"]

    async def health(self) -> Dict[str, Any]:
        response = await self._client.get("/health")
        response.raise_for_status()
        return response.json()

    async def sponsor(self, user_op: UserOperation, chain_id: int) -> UserOperation:
        data = await self._request(
            "POST",
            "/user-operations/sponsor",
            "Failed to sponsor UserOperation",
            json={"userOp": user_op.to_rpc_dict(), "chainId": chain_id},
        )
        model = UserOperation if user_op.signature is not None else UnsignedUserOperation
        return model.model_validate(data["sponsoredUserOp"])

    async def submit(self, user_op: UserOperation, chain_id: int) -> str:
        data = await self._request(
            "POST",
            "/user-operations",
            "Failed to submit UserOperation",
            json={"userOp": user_op.to_rpc_dict(), "chainId": chain_id},
        )
        return data["userOpHash"]

    async def get_status(self, user_op_hash: str) -> Dict[str, Any]:
        return await self._request(
            "GET",
            f"/user-operations/{user_op_hash}",
            "Failed to get UserOperation status",
        )

    async def get_receipt(self, user_op_hash: str) -> Optional[UserOperationReceipt]:
        data = await self.get_status(user_op_hash)
        if data.get("status") == "pending" or not data.get("receipt"):
            return None
        return UserOperationReceipt.model_validate({"userOpHash": user_op_hash, **data["receipt"]})
