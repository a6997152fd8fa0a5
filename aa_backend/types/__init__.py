from .requests import SponsorRequest, UserOperationRequest
from .responses import (
    ErrorBody,
    ErrorDetail,
    ErrorResponse,
    SponsorData,
    SponsorResponse,
    UserOperationData,
    UserOperationResponse,
    UserOperationStatus,
)

__all__ = [
    "SponsorRequest",
    "UserOperationRequest",
    "ErrorBody",
    "ErrorDetail",
    "ErrorResponse",
    "SponsorData",
    "SponsorResponse",
    "UserOperationData",
    "UserOperationResponse",
    "UserOperationStatus",
]
