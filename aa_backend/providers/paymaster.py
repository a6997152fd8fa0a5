"""
ERC-4337 Paymaster Provider.

Asks an ERC-7677 style paymaster service for sponsorship data and overlays
the returned fields on the UserOperation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .base import JsonRpcProvider
from .jsonrpc import JsonRpcClient
from ..config import Settings, settings
from ..core.errors import ConfigurationError, UpstreamError
from ..core.execution.userop import SponsorshipContext, UserOperation

logger = logging.getLogger(__name__)

# Response keys copied onto the sponsored operation, when present
_OVERLAY_KEYS = (
    "paymaster",
    "paymasterData",
    "paymasterVerificationGasLimit",
    "paymasterPostOpGasLimit",
    "callGasLimit",
    "verificationGasLimit",
    "preVerificationGas",
)


class PaymasterError(Exception):
    """Paymaster provider error."""
    pass


@dataclass
class PaymasterConfig:
    paymaster_id: str
    entry_point: str
    rpc_method: str = "pm_getPaymasterData"

    @classmethod
    def from_settings(cls, config: Settings) -> "PaymasterConfig":
        return cls(paymaster_id=config.paymaster_id, entry_point=config.entry_point_address)


def _to_hex(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return hex(value)
    return value


def parse_paymaster_result(result: Any) -> Dict[str, Any]:
    """Extract the overlay fields from a paymaster response."""
    if not isinstance(result, dict):
        raise PaymasterError("Invalid paymaster response")
    if not result.get("paymaster") or result.get("paymasterData") is None:
        raise PaymasterError("Paymaster response is missing paymaster or paymasterData")

    return {
        key: _to_hex(result[key])
        for key in _OVERLAY_KEYS
        if result.get(key) is not None
    }


class PaymasterProvider(JsonRpcProvider):
    name = "paymaster"

    def __init__(
        self,
        client: Optional[JsonRpcClient],
        config: Optional[PaymasterConfig] = None,
    ) -> None:
        super().__init__(client)
        self._config = config or PaymasterConfig.from_settings(settings)

    async def ready(self) -> bool:
        return self._client is not None and bool(self._config.paymaster_id)

    def _require_config(self) -> None:
        if self._client is None:
            raise ConfigurationError("PAYMASTER_SERVICE_URL is not set in environment variables")
        if not self._config.paymaster_id:
            raise ConfigurationError("PAYMASTER_ID is not set in environment variables")
        if not self._config.entry_point:
            raise ConfigurationError("ENTRY_POINT_ADDRESS is not set in environment variables")

    def build_context(self, calculate_gas_limits: bool = True) -> SponsorshipContext:
        self._require_config()
        return SponsorshipContext(
            paymaster_id=self._config.paymaster_id,
            calculate_gas_limits=calculate_gas_limits,
        )

    async def sponsor_user_operation(
        self,
        user_op: UserOperation,
        chain_id: int,
        calculate_gas_limits: bool = True,
    ) -> UserOperation:
        """Return a copy of ``user_op`` carrying paymaster fields.

        Gas limits revised by the paymaster are overlaid as well, so callers
        must sign the returned operation, not the one they sent.
        """
        try:
            context = self.build_context(calculate_gas_limits)
            logger.info(
                "Sponsoring UserOperation sender=%s chain_id=%s paymaster_id=%s",
                user_op.sender,
                chain_id,
                context.paymaster_id,
            )
            result = await self._client.call(
                self._config.rpc_method,
                [
                    user_op.without_paymaster(),
                    self._config.entry_point,
                    hex(chain_id),
                    context.model_dump(by_alias=True),
                ],
            )
            overlay = parse_paymaster_result(result)
            sponsored = type(user_op).model_validate({**user_op.to_rpc_dict(), **overlay})
        except Exception as exc:
            logger.error("Error sponsoring UserOperation: %s", exc)
            raise UpstreamError(f"Failed to sponsor UserOperation: {exc}") from exc

        logger.info(
            "UserOperation sponsored paymaster=%s total_gas_limit=%s",
            sponsored.paymaster,
            sponsored.total_gas_limit(),
        )
        return sponsored
