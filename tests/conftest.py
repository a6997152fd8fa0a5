from typing import Any, Callable, Dict

import pytest

from aa_backend.config import Settings
from fakes import CHAIN_ID, ENTRY_POINT, PAYMASTER, SENDER, TX_HASH, USER_OP_HASH


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _make(**overrides: Any) -> Settings:
        values = {
            "bundler_url": "https://bundler.example.com/rpc",
            "bundler_api_key": "",
            "paymaster_service_url": "https://paymaster.example.com/rpc",
            "paymaster_id": "pm_test123",
            "entry_point_address": ENTRY_POINT,
            "chain_id": CHAIN_ID,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def user_op_payload() -> Dict[str, Any]:
    """Unsponsored UserOperation with the placeholder signature."""
    return {
        "sender": SENDER,
        "nonce": "0x0",
        "callData": "0xb61d27f6",
        "callGasLimit": "0x50000",
        "verificationGasLimit": "0x100000",
        "preVerificationGas": "0x20000",
        "maxFeePerGas": "0x3b9aca00",
        "maxPriorityFeePerGas": "0x3b9aca00",
        "signature": "0x",
    }


@pytest.fixture
def paymaster_result() -> Dict[str, Any]:
    return {
        "paymaster": PAYMASTER,
        "paymasterData": "0xdeadbeef",
        "paymasterVerificationGasLimit": "0x186a0",
        "paymasterPostOpGasLimit": "0xc350",
        "callGasLimit": "0x60000",
    }


@pytest.fixture
def receipt_result() -> Dict[str, Any]:
    return {
        "userOpHash": USER_OP_HASH,
        "success": True,
        "actualGasUsed": "0x1d4c0",
        "receipt": {
            "transactionHash": TX_HASH,
            "blockNumber": "0x10",
            "logs": [{"address": SENDER, "topics": [], "data": "0x"}],
        },
    }
