"""
ERC-4337 Bundler Provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .base import JsonRpcProvider
from .jsonrpc import JsonRpcClient
from ..config import Settings, settings
from ..core.errors import ConfigurationError, UpstreamError
from ..core.execution.userop import UserOperation, UserOperationReceipt

logger = logging.getLogger(__name__)


class BundlerError(Exception):
    """Bundler provider error."""
    pass


@dataclass
class BundlerConfig:
    entry_point: str
    chain_id: Optional[int] = None

    @classmethod
    def from_settings(cls, config: Settings) -> "BundlerConfig":
        return cls(entry_point=config.entry_point_address, chain_id=config.chain_id)


class BundlerProvider(JsonRpcProvider):
    name = "bundler"

    def __init__(
        self,
        client: Optional[JsonRpcClient],
        config: Optional[BundlerConfig] = None,
    ) -> None:
        super().__init__(client)
        self._config = config or BundlerConfig.from_settings(settings)

    async def ready(self) -> bool:
        return self._client is not None and bool(self._config.entry_point and self._config.chain_id)

    def _require_config(self) -> None:
        if self._client is None:
            raise ConfigurationError("BUNDLER_URL is not set in environment variables")
        if not self._config.entry_point:
            raise ConfigurationError("ENTRY_POINT_ADDRESS is not set in environment variables")
        if not self._config.chain_id:
            raise ConfigurationError("CHAIN_ID is not set in environment variables")

    async def send_user_operation(self, user_op: UserOperation) -> str:
        try:
            self._require_config()
            logger.info(
                "Sending UserOperation sender=%s nonce=%s call_data=%s... total_gas_limit=%s",
                user_op.sender,
                user_op.nonce,
                user_op.call_data[:20],
                user_op.total_gas_limit(),
            )
            result = await self._client.call(
                "eth_sendUserOperation",
                [user_op.to_rpc_dict(), self._config.entry_point],
            )
            if not isinstance(result, str):
                raise BundlerError("Invalid bundler response for eth_sendUserOperation")
        except Exception as exc:
            logger.error("Error sending UserOperation: %s", exc)
            raise UpstreamError(f"Failed to send UserOperation: {exc}") from exc

        logger.info("UserOperation sent user_op_hash=%s", result)
        return result

    async def get_user_operation_receipt(self, user_op_hash: str) -> Optional[UserOperationReceipt]:
        """Look up a receipt; None means the operation is not included yet."""
        try:
            self._require_config()
            result = await self._client.call(
                "eth_getUserOperationReceipt",
                [user_op_hash],
            )
            if result is not None and not isinstance(result, dict):
                raise BundlerError("Invalid bundler response for eth_getUserOperationReceipt")
            receipt = UserOperationReceipt.from_rpc(user_op_hash, result) if result else None
        except Exception as exc:
            logger.error("Error getting UserOperation receipt: %s", exc)
            raise UpstreamError(f"Failed to get UserOperation receipt: {exc}") from exc

        if receipt is None:
            logger.info("UserOperation pending user_op_hash=%s", user_op_hash)
            return None

        logger.info(
            "UserOperation included user_op_hash=%s tx_hash=%s block=%s success=%s gas_used=%s",
            user_op_hash,
            receipt.transaction_hash,
            receipt.block_number,
            receipt.success,
            receipt.actual_gas_used,
        )
        return receipt
