from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


UserOperationStatus = Literal["submitted", "pending", "confirmed", "failed"]


class ErrorDetail(BaseModel):
    field: str = Field(description="Dotted path of the offending field")
    message: str = Field(description="What is wrong with it")


class ErrorBody(BaseModel):
    code: str = Field(description="Machine readable error code")
    message: str = Field(description="Human readable error message")
    details: Optional[List[ErrorDetail]] = Field(default=None, description="Validation violations")


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: ErrorBody


class SponsorData(BaseModel):
    sponsoredUserOp: Dict[str, Any]


class SponsorResponse(BaseModel):
    success: bool = True
    data: SponsorData


class UserOperationData(BaseModel):
    userOpHash: str
    status: UserOperationStatus
    receipt: Optional[Dict[str, Any]] = None


class UserOperationResponse(BaseModel):
    success: bool = True
    data: UserOperationData
