from pydantic import BaseModel, ConfigDict, Field

from ..core.execution.userop import ChainId, UnsignedUserOperation, UserOperation


class SponsorRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_op: UnsignedUserOperation = Field(alias="userOp", description="UserOperation to sponsor; signature optional")
    chain_id: ChainId = Field(alias="chainId", description="Target chain ID")


class UserOperationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_op: UserOperation = Field(alias="userOp", description="Signed UserOperation")
    chain_id: ChainId = Field(alias="chainId", description="Target chain ID")
