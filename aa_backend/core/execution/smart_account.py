"""
Smart Account capability consumed by the UserOperation flow.

Address derivation, nonce lookup, call encoding and signing belong to a
Smart Account SDK; this module only describes the calls the flow makes.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from .userop import UserOperation


@dataclass
class FactoryArgs:
    factory: Optional[str] = None
    factory_data: Optional[str] = None


@dataclass
class Call:
    to: str
    value: int = 0
    data: str = "0x"


class SmartAccount(Protocol):
    async def get_address(self) -> str:
        ...

    async def get_nonce(self) -> int:
        ...

    async def get_factory_args(self) -> FactoryArgs:
        ...

    async def encode_execute(self, call: Call) -> str:
        ...

    async def sign_user_operation(self, user_op: UserOperation) -> str:
        ...
