"""
UserOperation service used by the execution flow.

The flow only needs sponsor / submit / get_receipt. ProviderUserOperationService
answers them in-process from the providers; the HTTP client in
``aa_backend.api_client`` answers them through the backend API.
"""

from __future__ import annotations

from typing import Optional, Protocol

from .userop import UserOperation, UserOperationReceipt
from ...providers.bundler import BundlerProvider
from ...providers.paymaster import PaymasterProvider


class UserOperationService(Protocol):
    async def sponsor(self, user_op: UserOperation, chain_id: int) -> UserOperation:
        ...

    async def submit(self, user_op: UserOperation, chain_id: int) -> str:
        ...

    async def get_receipt(self, user_op_hash: str) -> Optional[UserOperationReceipt]:
        ...


class ProviderUserOperationService:
    def __init__(self, bundler: BundlerProvider, paymaster: PaymasterProvider) -> None:
        self.bundler = bundler
        self.paymaster = paymaster

    async def sponsor(self, user_op: UserOperation, chain_id: int) -> UserOperation:
        return await self.paymaster.sponsor_user_operation(user_op, chain_id)

    async def submit(self, user_op: UserOperation, chain_id: int) -> str:
        return await self.bundler.send_user_operation(user_op)

    async def get_receipt(self, user_op_hash: str) -> Optional[UserOperationReceipt]:
        return await self.bundler.get_user_operation_receipt(user_op_hash)
