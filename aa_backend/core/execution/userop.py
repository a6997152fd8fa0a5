"""
ERC-4337 UserOperation models and helpers.

All numeric and byte fields are carried as 0x-prefixed hex strings and are
never decoded, with the exception of ``total_gas_limit`` which is only used
for log output.
"""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StringConstraints
from pydantic.alias_generators import to_camel


ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
QUANTITY_PATTERN = r"^0x[a-fA-F0-9]+$"
HEX_DATA_PATTERN = r"^0x[a-fA-F0-9]*$"
USER_OP_HASH_PATTERN = r"^0x[a-fA-F0-9]{64}$"

Address = Annotated[str, StringConstraints(pattern=ADDRESS_PATTERN)]
HexQuantity = Annotated[str, StringConstraints(pattern=QUANTITY_PATTERN)]
HexData = Annotated[str, StringConstraints(pattern=HEX_DATA_PATTERN)]
UserOpHash = Annotated[str, StringConstraints(pattern=USER_OP_HASH_PATTERN)]
ChainId = Annotated[StrictInt, Field(gt=0)]

PLACEHOLDER_SIGNATURE = "0x"

# Fields a paymaster owns; stripped before asking for sponsorship
PAYMASTER_FIELDS = (
    "paymaster",
    "paymaster_data",
    "paymaster_verification_gas_limit",
    "paymaster_post_op_gas_limit",
)

GAS_LIMIT_FIELDS = (
    "call_gas_limit",
    "verification_gas_limit",
    "pre_verification_gas",
    "paymaster_verification_gas_limit",
    "paymaster_post_op_gas_limit",
)


class _RpcModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class UserOperation(_RpcModel):
    """
    ERC-4337 (v0.7) UserOperation payload.

    Optional factory and paymaster fields are omitted from the wire format
    when unset.
    """
    sender: Address
    nonce: HexQuantity
    call_data: HexData
    call_gas_limit: HexQuantity
    verification_gas_limit: HexQuantity
    pre_verification_gas: HexQuantity
    max_fee_per_gas: HexQuantity
    max_priority_fee_per_gas: HexQuantity
    signature: HexData
    # Optional fields are absent or well-formed; an explicit null is rejected.
    # Defaults are not validated, so None below only means "unset".
    factory: Address = None
    factory_data: HexData = None
    paymaster: Address = None
    paymaster_data: HexData = None
    paymaster_verification_gas_limit: HexQuantity = None
    paymaster_post_op_gas_limit: HexQuantity = None

    def to_rpc_dict(self, *, exclude: Optional[set] = None) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, exclude=exclude)

    def without_paymaster(self) -> Dict[str, Any]:
        return self.to_rpc_dict(exclude=set(PAYMASTER_FIELDS))

    def with_signature(self, signature: str) -> "UserOperation":
        return self.model_copy(update={"signature": signature})

    @property
    def is_sponsored(self) -> bool:
        return bool(self.paymaster)

    def total_gas_limit(self) -> int:
        return sum(int(getattr(self, name), 16) for name in GAS_LIMIT_FIELDS if getattr(self, name))


class UnsignedUserOperation(UserOperation):
    """UserOperation accepted for sponsorship, before the real signature exists."""
    signature: HexData = None


class UserOperationReceipt(_RpcModel):
    user_op_hash: str
    transaction_hash: str
    block_number: Any = None
    success: bool
    actual_gas_used: str = "0x0"
    logs: List[Any] = Field(default_factory=list)

    @classmethod
    def from_rpc(cls, user_op_hash: str, data: Dict[str, Any]) -> Optional["UserOperationReceipt"]:
        """Reshape an ``eth_getUserOperationReceipt`` result.

        Returns None when the bundler has not attached a transaction yet.
        """
        receipt = data.get("receipt") or {}
        transaction_hash = receipt.get("transactionHash")
        if not transaction_hash:
            return None

        return cls(
            user_op_hash=user_op_hash,
            transaction_hash=transaction_hash,
            block_number=receipt.get("blockNumber"),
            success=bool(data.get("success")),
            actual_gas_used=data.get("actualGasUsed") or "0x0",
            logs=receipt.get("logs") or [],
        )

    def to_api_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"user_op_hash"})


class SponsorshipContext(_RpcModel):
    paymaster_id: str
    calculate_gas_limits: bool = True
