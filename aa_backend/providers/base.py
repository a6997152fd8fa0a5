from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .jsonrpc import JsonRpcClient


class Provider(ABC):
    """Base provider interface"""

    name: str

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class JsonRpcProvider(Provider):
    """Provider backed by a shared JSON-RPC client"""

    def __init__(self, client: Optional[JsonRpcClient]) -> None:
        self._client = client

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "disabled", "reason": f"{self.name.capitalize()} not configured"}

        try:
            result = await self._client.call("eth_chainId", [])
            return {"status": "healthy", "chainId": result}
        except Exception as exc:
            return {"status": "error", "reason": str(exc)}
