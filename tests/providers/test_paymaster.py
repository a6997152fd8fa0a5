"""
Tests for the paymaster provider.
"""

import httpx
import pytest

from aa_backend.core.errors import UpstreamError
from aa_backend.core.execution.userop import UnsignedUserOperation, UserOperation
from aa_backend.providers.jsonrpc import JsonRpcClient
from aa_backend.providers.paymaster import PaymasterConfig, PaymasterProvider, parse_paymaster_result
from fakes import CHAIN_ID, ENTRY_POINT, PAYMASTER, FakeRpcUpstream, RpcError

PAYMASTER_URL = "https://paymaster.example.com/rpc"


def make_provider(transport, paymaster_id="pm_test123", entry_point=ENTRY_POINT) -> PaymasterProvider:
    client = JsonRpcClient(PAYMASTER_URL, transport=transport)
    return PaymasterProvider(client, PaymasterConfig(paymaster_id=paymaster_id, entry_point=entry_point))


class TestSponsorUserOperation:

    @pytest.mark.asyncio
    async def test_overlays_paymaster_fields(self, user_op_payload, paymaster_result):
        upstream = FakeRpcUpstream({"pm_getPaymasterData": lambda params: paymaster_result})
        provider = make_provider(upstream.transport)
        user_op = UserOperation.model_validate(user_op_payload)

        sponsored = await provider.sponsor_user_operation(user_op, CHAIN_ID)

        assert sponsored is not user_op
        assert sponsored.paymaster == PAYMASTER
        assert sponsored.paymaster_data == "0xdeadbeef"
        assert sponsored.paymaster_verification_gas_limit == "0x186a0"
        assert sponsored.paymaster_post_op_gas_limit == "0xc350"
        assert sponsored.call_gas_limit == "0x60000"
        # untouched fields pass through
        assert sponsored.verification_gas_limit == "0x100000"
        assert sponsored.signature == "0x"
        # input left as it was
        assert user_op.paymaster is None
        assert user_op.call_gas_limit == "0x50000"

    @pytest.mark.asyncio
    async def test_request_shape(self, user_op_payload, paymaster_result):
        upstream = FakeRpcUpstream({"pm_getPaymasterData": lambda params: paymaster_result})
        provider = make_provider(upstream.transport)
        user_op = UserOperation.model_validate({**user_op_payload, "paymaster": PAYMASTER, "paymasterData": "0x01"})

        await provider.sponsor_user_operation(user_op, CHAIN_ID)

        assert upstream.methods() == ["pm_getPaymasterData"]
        call = upstream.calls[0]
        assert call["url"] == PAYMASTER_URL
        assert call["jsonrpc"] == "2.0"
        op, entry_point, chain_id, context = call["params"]
        assert op == user_op_payload
        assert entry_point == ENTRY_POINT
        assert chain_id == hex(CHAIN_ID)
        assert context == {"paymasterId": "pm_test123", "calculateGasLimits": True}

    @pytest.mark.asyncio
    async def test_unsigned_operation_stays_unsigned(self, user_op_payload, paymaster_result):
        del user_op_payload["signature"]
        upstream = FakeRpcUpstream({"pm_getPaymasterData": lambda params: paymaster_result})
        provider = make_provider(upstream.transport)

        sponsored = await provider.sponsor_user_operation(
            UnsignedUserOperation.model_validate(user_op_payload), CHAIN_ID
        )

        assert isinstance(sponsored, UnsignedUserOperation)
        assert "signature" not in sponsored.to_rpc_dict()

    @pytest.mark.asyncio
    async def test_integer_gas_values_are_hex_encoded(self, user_op_payload):
        result = {"paymaster": PAYMASTER, "paymasterData": "0x", "paymasterPostOpGasLimit": 50000}
        upstream = FakeRpcUpstream({"pm_getPaymasterData": lambda params: result})
        provider = make_provider(upstream.transport)

        sponsored = await provider.sponsor_user_operation(UserOperation.model_validate(user_op_payload), CHAIN_ID)

        assert sponsored.paymaster_post_op_gas_limit == "0xc350"

    @pytest.mark.asyncio
    async def test_rpc_error_is_wrapped(self, user_op_payload):
        upstream = FakeRpcUpstream({"pm_getPaymasterData": lambda params: RpcError("policy rejected")})
        provider = make_provider(upstream.transport)

        with pytest.raises(UpstreamError) as exc_info:
            await provider.sponsor_user_operation(UserOperation.model_validate(user_op_payload), CHAIN_ID)

        assert exc_info.value.message == "Failed to sponsor UserOperation: policy rejected"

    @pytest.mark.asyncio
    async def test_unreachable_upstream_is_wrapped(self, user_op_payload):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(httpx.MockTransport(refuse))

        with pytest.raises(UpstreamError) as exc_info:
            await provider.sponsor_user_operation(UserOperation.model_validate(user_op_payload), CHAIN_ID)

        assert exc_info.value.message.startswith("Failed to sponsor UserOperation: ")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_missing_paymaster_id_fails_before_calling(self, user_op_payload):
        upstream = FakeRpcUpstream()
        provider = make_provider(upstream.transport, paymaster_id="")

        with pytest.raises(UpstreamError) as exc_info:
            await provider.sponsor_user_operation(UserOperation.model_validate(user_op_payload), CHAIN_ID)

        assert exc_info.value.message == (
            "Failed to sponsor UserOperation: PAYMASTER_ID is not set in environment variables"
        )
        assert upstream.calls == []

    @pytest.mark.asyncio
    async def test_missing_entry_point_fails_before_calling(self, user_op_payload):
        upstream = FakeRpcUpstream()
        provider = make_provider(upstream.transport, entry_point="")

        with pytest.raises(UpstreamError) as exc_info:
            await provider.sponsor_user_operation(UserOperation.model_validate(user_op_payload), CHAIN_ID)

        assert exc_info.value.message == (
            "Failed to sponsor UserOperation: ENTRY_POINT_ADDRESS is not set in environment variables"
        )
        assert upstream.calls == []

    @pytest.mark.asyncio
    async def test_missing_client_fails(self, user_op_payload):
        provider = PaymasterProvider(None, PaymasterConfig(paymaster_id="pm_1", entry_point=ENTRY_POINT))

        with pytest.raises(UpstreamError, match="PAYMASTER_SERVICE_URL is not set"):
            await provider.sponsor_user_operation(UserOperation.model_validate(user_op_payload), CHAIN_ID)


class TestParsePaymasterResult:

    def test_requires_paymaster_and_data(self):
        with pytest.raises(Exception, match="missing paymaster"):
            parse_paymaster_result({"paymaster": PAYMASTER})

    def test_rejects_non_object(self):
        with pytest.raises(Exception, match="Invalid paymaster response"):
            parse_paymaster_result(None)

    def test_ignores_unknown_keys(self):
        overlay = parse_paymaster_result({"paymaster": PAYMASTER, "paymasterData": "0x", "sponsor": {"name": "x"}})

        assert overlay == {"paymaster": PAYMASTER, "paymasterData": "0x"}


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_disabled_without_client(self):
        provider = PaymasterProvider(None, PaymasterConfig(paymaster_id="", entry_point=ENTRY_POINT))

        assert await provider.health_check() == {"status": "disabled", "reason": "Paymaster not configured"}

    @pytest.mark.asyncio
    async def test_healthy_when_upstream_answers(self):
        upstream = FakeRpcUpstream({"eth_chainId": lambda params: hex(CHAIN_ID)})
        provider = make_provider(upstream.transport)

        assert await provider.health_check() == {"status": "healthy", "chainId": hex(CHAIN_ID)}
