from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from .dependencies import get_bundler_provider, get_paymaster_provider
from ..providers.bundler import BundlerProvider
from ..providers.paymaster import PaymasterProvider

router = APIRouter()


@router.get("/health")
async def health_check(
    bundler: BundlerProvider = Depends(get_bundler_provider),
    paymaster: PaymasterProvider = Depends(get_paymaster_provider),
) -> Dict[str, Any]:
    """Health check endpoint that verifies upstream status"""

    services = {
        "bundler": await bundler.health_check(),
        "paymaster": await paymaster.health_check(),
    }

    all_healthy = all(status["status"] == "healthy" for status in services.values())

    return {
        "status": "ok" if all_healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services,
    }
