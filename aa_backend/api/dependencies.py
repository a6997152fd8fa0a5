"""
Upstream clients and the FastAPI dependencies that hand them to routes.

``build_upstreams`` is called once by the application factory; the resulting
providers live on ``app.state`` for the lifetime of the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from fastapi import Request

from ..config import Settings
from ..providers.bundler import BundlerConfig, BundlerProvider
from ..providers.jsonrpc import JsonRpcClient
from ..providers.paymaster import PaymasterConfig, PaymasterProvider

logger = logging.getLogger(__name__)


@dataclass
class Upstreams:
    bundler: BundlerProvider
    paymaster: PaymasterProvider
    clients: List[JsonRpcClient] = field(default_factory=list)

    async def aclose(self) -> None:
        for client in self.clients:
            if not client.is_closed:
                await client.aclose()


def build_upstreams(
    config: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Upstreams:
    """Create one JSON-RPC client per configured upstream.

    An unconfigured upstream gets no client; its provider reports a
    configuration error on first use.
    """
    clients: List[JsonRpcClient] = []

    bundler_client: Optional[JsonRpcClient] = None
    if config.bundler_url:
        headers = {"x-api-key": config.bundler_api_key} if config.bundler_api_key else None
        bundler_client = JsonRpcClient(
            config.bundler_url,
            headers=headers,
            timeout_s=config.upstream_timeout_seconds,
            transport=transport,
        )
        clients.append(bundler_client)
        logger.info("Bundler client initialized: %s", config.bundler_url)
        if config.bundler_api_key:
            logger.info("Bundler API key: %s...", config.bundler_api_key[:8])

    paymaster_client: Optional[JsonRpcClient] = None
    if config.paymaster_service_url:
        paymaster_client = JsonRpcClient(
            config.paymaster_service_url,
            timeout_s=config.upstream_timeout_seconds,
            transport=transport,
        )
        clients.append(paymaster_client)
        logger.info("Paymaster client initialized: %s", config.paymaster_service_url)

    return Upstreams(
        bundler=BundlerProvider(bundler_client, BundlerConfig.from_settings(config)),
        paymaster=PaymasterProvider(paymaster_client, PaymasterConfig.from_settings(config)),
        clients=clients,
    )


def get_bundler_provider(request: Request) -> BundlerProvider:
    return request.app.state.upstreams.bundler


def get_paymaster_provider(request: Request) -> PaymasterProvider:
    return request.app.state.upstreams.paymaster
