"""
UserOperation API

- POST /user-operations/sponsor  paymaster sponsorship
- POST /user-operations          submit a signed operation to the bundler
- GET  /user-operations/{hash}   single-shot status / receipt lookup
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from .dependencies import get_bundler_provider, get_paymaster_provider
from .validators import (
    validate_sponsor_request,
    validate_user_op_hash,
    validate_user_operation_request,
)
from ..core.errors import AccountAbstractionError, ApiError
from ..providers.bundler import BundlerProvider
from ..providers.paymaster import PaymasterProvider
from ..types.responses import (
    ErrorResponse,
    SponsorData,
    SponsorResponse,
    UserOperationData,
    UserOperationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user-operations", tags=["user-operations"])

_ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(
    "/sponsor",
    response_model=SponsorResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Get paymaster sponsorship for a UserOperation",
)
async def sponsor_user_operation(
    body: Any = Body(None),
    paymaster: PaymasterProvider = Depends(get_paymaster_provider),
) -> SponsorResponse:
    request = validate_sponsor_request(body if body is not None else {})
    logger.info("Received sponsor request sender=%s chain_id=%s", request.user_op.sender, request.chain_id)

    try:
        sponsored = await paymaster.sponsor_user_operation(request.user_op, request.chain_id)
    except AccountAbstractionError as exc:
        raise ApiError(exc.message, status_code=400, code="SPONSOR_FAILED") from exc

    return SponsorResponse(data=SponsorData(sponsoredUserOp=sponsored.to_rpc_dict()))


@router.post(
    "",
    response_model=UserOperationResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Submit a signed UserOperation to the bundler",
)
async def submit_user_operation(
    body: Any = Body(None),
    bundler: BundlerProvider = Depends(get_bundler_provider),
) -> UserOperationResponse:
    request = validate_user_operation_request(body if body is not None else {})
    logger.info(
        "Submitting UserOperation chain_id=%s sender=%s nonce=%s",
        request.chain_id,
        request.user_op.sender,
        request.user_op.nonce,
    )

    try:
        user_op_hash = await bundler.send_user_operation(request.user_op)
    except AccountAbstractionError as exc:
        raise ApiError(exc.message, status_code=400, code="USEROP_SUBMISSION_FAILED") from exc

    return UserOperationResponse(data=UserOperationData(userOpHash=user_op_hash, status="submitted"))


@router.get(
    "/{hash}",
    response_model=UserOperationResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Get the status and receipt of a UserOperation",
)
async def get_user_operation(
    hash: str,
    bundler: BundlerProvider = Depends(get_bundler_provider),
) -> UserOperationResponse:
    user_op_hash = validate_user_op_hash(hash)

    try:
        receipt = await bundler.get_user_operation_receipt(user_op_hash)
    except AccountAbstractionError as exc:
        raise ApiError(exc.message, status_code=400, code="USEROP_STATUS_CHECK_FAILED") from exc

    if receipt is None:
        return UserOperationResponse(data=UserOperationData(userOpHash=user_op_hash, status="pending"))

    return UserOperationResponse(
        data=UserOperationData(
            userOpHash=user_op_hash,
            status="confirmed" if receipt.success else "failed",
            receipt=receipt.to_api_dict(),
        )
    )
