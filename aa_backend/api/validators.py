"""
Request validation for the UserOperation routes.

Bodies are checked against the ERC-4337 field formats before any upstream
call. Violations are reported as ``[{field, message}]`` with dotted field
paths (``userOp.sender``).
"""

import re
from typing import Any, Dict, List, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import RequestValidationError
from ..core.execution.userop import USER_OP_HASH_PATTERN
from ..types.requests import SponsorRequest, UserOperationRequest

M = TypeVar("M", bound=BaseModel)

_ADDRESS_FIELDS = ("sender", "factory", "paymaster")
_FORMAT_FIELDS = (
    "nonce",
    "callData",
    "callGasLimit",
    "verificationGasLimit",
    "preVerificationGas",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "signature",
    "factoryData",
    "paymasterData",
    "paymasterVerificationGasLimit",
    "paymasterPostOpGasLimit",
)

FIELD_MESSAGES: Dict[str, str] = {
    **{name: f"Invalid {name} address" for name in _ADDRESS_FIELDS},
    **{name: f"Invalid {name} format" for name in _FORMAT_FIELDS},
    "chainId": "Chain ID must be a positive integer",
}


def _violation_message(loc: List[str], error: Dict[str, Any]) -> str:
    if error["type"] == "missing" or not loc:
        return error["msg"]
    return FIELD_MESSAGES.get(loc[-1], error["msg"])


def violations_from_errors(
    errors: Sequence[Any], strip_prefix: Tuple[str, ...] = ()
) -> List[Dict[str, str]]:
    details = []
    for error in errors:
        loc = [str(part) for part in error["loc"]]
        if loc and loc[0] in strip_prefix:
            loc = loc[1:]
        details.append({"field": ".".join(loc), "message": _violation_message(loc, error)})
    return details


def _validate(model: Type[M], body: Any, code: str, message: str) -> M:
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(code, message, violations_from_errors(exc.errors())) from exc


def validate_sponsor_request(body: Any) -> SponsorRequest:
    return _validate(SponsorRequest, body, "INVALID_SPONSOR_REQUEST", "Invalid sponsor request")


def validate_user_operation_request(body: Any) -> UserOperationRequest:
    return _validate(
        UserOperationRequest, body, "INVALID_REQUEST", "Invalid UserOperation request"
    )


def validate_user_op_hash(value: Any) -> str:
    if not isinstance(value, str) or not re.fullmatch(USER_OP_HASH_PATTERN, value):
        raise RequestValidationError(
            "INVALID_HASH",
            "Invalid userOpHash parameter",
            [{"field": "hash", "message": "Invalid userOpHash format"}],
        )
    return value
