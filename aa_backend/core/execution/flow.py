"""
UserOperation Flow

Drives one UserOperation from construction to receipt:

    idle -> sponsoring -> signing -> submitting -> polling -> success
                 \\            \\            \\           \\-> error

Any exception moves the flow to ERROR and is kept on the result. The only
retried step is the receipt poll.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Coroutine, Dict, List, Optional, Set

import structlog

from .service import UserOperationService
from .smart_account import Call, SmartAccount
from .userop import PLACEHOLDER_SIGNATURE, UserOperation, UserOperationReceipt
from ..errors import InvalidTransitionError, UpstreamError
from ..recovery import PollConfig, poll_until
from ...config import Settings


class FlowState(str, Enum):
    """States of a UserOperation flow."""

    IDLE = "idle"
    SPONSORING = "sponsoring"
    SIGNING = "signing"
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class FlowTransition:
    """Record of a state transition."""

    from_state: FlowState
    to_state: FlowState
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fromState": self.from_state.value,
            "toState": self.to_state.value,
            "timestamp": self.timestamp.isoformat(),
            "errorMessage": self.error_message,
        }


@dataclass
class GasDefaults:
    """Gas fields for the unsigned operation; the paymaster may revise the limits."""

    call_gas_limit: str = "0x50000"
    verification_gas_limit: str = "0x100000"
    pre_verification_gas: str = "0x20000"
    max_fee_per_gas: str = "0x3b9aca00"
    max_priority_fee_per_gas: str = "0x3b9aca00"


@dataclass
class FlowResult:
    state: FlowState = FlowState.IDLE
    user_op_hash: Optional[str] = None
    receipt: Optional[UserOperationReceipt] = None
    error: Optional[Exception] = None
    history: List[FlowTransition] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == FlowState.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "userOpHash": self.user_op_hash,
            "receipt": self.receipt.to_api_dict() if self.receipt else None,
            "error": str(self.error) if self.error else None,
            "history": [t.to_dict() for t in self.history],
        }


TransitionCallback = Callable[[FlowTransition], Coroutine[Any, Any, None]]

RECEIPT_NOT_FOUND = "UserOperation receipt not found after polling"


class UserOperationFlow:
    """
    Sponsor, sign, submit and confirm a single UserOperation.

    The flow is sequential; one instance runs one operation at a time and can
    be reused once it reaches a terminal state.
    """

    TRANSITIONS: Dict[FlowState, Set[FlowState]] = {
        FlowState.IDLE: {FlowState.SPONSORING, FlowState.ERROR},
        FlowState.SPONSORING: {FlowState.SIGNING, FlowState.ERROR},
        FlowState.SIGNING: {FlowState.SUBMITTING, FlowState.ERROR},
        FlowState.SUBMITTING: {FlowState.POLLING, FlowState.ERROR},
        FlowState.POLLING: {FlowState.SUCCESS, FlowState.ERROR},
        FlowState.SUCCESS: {FlowState.IDLE},
        FlowState.ERROR: {FlowState.IDLE},
    }

    TERMINAL_STATES = {FlowState.SUCCESS, FlowState.ERROR}

    def __init__(
        self,
        account: SmartAccount,
        service: UserOperationService,
        chain_id: int,
        poll_config: Optional[PollConfig] = None,
        gas: Optional[GasDefaults] = None,
        on_transition: Optional[TransitionCallback] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        self.account = account
        self.service = service
        self.chain_id = chain_id
        self.poll_config = poll_config or PollConfig()
        self.gas = gas or GasDefaults()
        self.logger = logger or logging.getLogger(__name__)
        self._on_transition = on_transition
        self._sleep = sleep
        self._result = FlowResult()

    @classmethod
    def from_settings(
        cls,
        account: SmartAccount,
        service: UserOperationService,
        config: Settings,
        **kwargs: Any,
    ) -> "UserOperationFlow":
        return cls(
            account=account,
            service=service,
            chain_id=config.chain_id,
            poll_config=PollConfig.fixed(
                config.receipt_poll_max_attempts,
                config.receipt_poll_interval_seconds,
            ),
            **kwargs,
        )

    @property
    def state(self) -> FlowState:
        return self._result.state

    @property
    def result(self) -> FlowResult:
        return self._result

    def can_transition_to(self, target: FlowState) -> bool:
        return target in self.TRANSITIONS.get(self.state, set())

    async def _transition_to(self, target: FlowState, error: Optional[Exception] = None) -> None:
        if not self.can_transition_to(target):
            raise InvalidTransitionError(self.state.value, target.value)

        transition = FlowTransition(
            from_state=self.state,
            to_state=target,
            error_message=str(error) if error else None,
        )
        self._result.state = target
        self._result.history.append(transition)
        self.logger.debug("UserOperation flow %s -> %s", transition.from_state.value, target.value)

        if self._on_transition:
            await self._on_transition(transition)

    async def reset(self) -> None:
        if self.state == FlowState.IDLE:
            return
        await self._transition_to(FlowState.IDLE)
        self._result = FlowResult()

    async def build_user_operation(self, call: Optional[Call] = None) -> UserOperation:
        """Build the unsigned operation with a placeholder signature."""
        address = await self.account.get_address()
        nonce = await self.account.get_nonce()
        factory_args = await self.account.get_factory_args()
        # A zero-value self-call when nothing else is requested
        call_data = await self.account.encode_execute(call or Call(to=address))

        # Deployed accounts have no factory; unset fields stay absent
        factory_fields = {
            name: value
            for name, value in (
                ("factory", factory_args.factory),
                ("factory_data", factory_args.factory_data),
            )
            if value is not None
        }

        return UserOperation(
            sender=address,
            nonce=hex(nonce),
            call_data=call_data,
            call_gas_limit=self.gas.call_gas_limit,
            verification_gas_limit=self.gas.verification_gas_limit,
            pre_verification_gas=self.gas.pre_verification_gas,
            max_fee_per_gas=self.gas.max_fee_per_gas,
            max_priority_fee_per_gas=self.gas.max_priority_fee_per_gas,
            signature=PLACEHOLDER_SIGNATURE,
            **factory_fields,
        )

    async def wait_for_receipt(self, user_op_hash: str) -> UserOperationReceipt:
        with structlog.contextvars.bound_contextvars(user_op_hash=user_op_hash):
            return await poll_until(
                lambda: self.service.get_receipt(user_op_hash),
                config=self.poll_config,
                retry_on=(UpstreamError,),
                exhausted_message=RECEIPT_NOT_FOUND,
                sleep=self._sleep,
                logger=self.logger,
            )

    async def run(self, call: Optional[Call] = None) -> FlowResult:
        """Run the whole flow; failures end in ERROR rather than raising."""
        if self.state in self.TERMINAL_STATES:
            await self.reset()
        if self.state != FlowState.IDLE:
            raise InvalidTransitionError(self.state.value, FlowState.SPONSORING.value)

        try:
            user_op = await self.build_user_operation(call)
            self.logger.info("UserOperation built sender=%s nonce=%s", user_op.sender, user_op.nonce)

            await self._transition_to(FlowState.SPONSORING)
            sponsored = await self.service.sponsor(user_op, self.chain_id)
            self.logger.info("UserOperation sponsored paymaster=%s", sponsored.paymaster)

            await self._transition_to(FlowState.SIGNING)
            signature = await self.account.sign_user_operation(sponsored)
            signed = sponsored.with_signature(signature)

            await self._transition_to(FlowState.SUBMITTING)
            user_op_hash = await self.service.submit(signed, self.chain_id)
            self._result.user_op_hash = user_op_hash
            self.logger.info("UserOperation submitted user_op_hash=%s", user_op_hash)

            await self._transition_to(FlowState.POLLING)
            receipt = await self.wait_for_receipt(user_op_hash)
            self._result.receipt = receipt
            self.logger.info(
                "UserOperation confirmed tx_hash=%s block=%s success=%s gas_used=%s",
                receipt.transaction_hash,
                receipt.block_number,
                receipt.success,
                receipt.actual_gas_used,
            )
            await self._transition_to(FlowState.SUCCESS)
        except Exception as exc:
            self.logger.error("UserOperation flow failed in %s: %s", self.state.value, exc)
            self._result.error = exc
            if self.can_transition_to(FlowState.ERROR):
                try:
                    await self._transition_to(FlowState.ERROR, error=exc)
                except Exception:
                    # State is already ERROR; only the observer failed
                    self.logger.exception("on_transition callback failed entering error state")

        return self._result
