#!/usr/bin/env python3
"""Simple CLI for exercising the Account Abstraction backend locally"""

import argparse
import asyncio
from typing import Any, Dict, Optional

from aa_backend.api_client import BackendApiClient
from aa_backend.config import settings
from aa_backend.core.errors import AccountAbstractionError, PollExhaustedError
from aa_backend.core.recovery import PollConfig, poll_until


def print_status(data: Dict[str, Any]) -> None:
    """Pretty print a status response"""
    status = data.get("status", "unknown")
    icon = {"pending": "⏳", "confirmed": "✅", "failed": "❌"}.get(status, "•")

    print(f"\n{icon} UserOperation {data.get('userOpHash')}")
    print("=" * 50)
    print(f"Status: {status}")

    receipt = data.get("receipt")
    if receipt:
        print(f"Transaction Hash: {receipt.get('transactionHash')}")
        print(f"Block Number:     {receipt.get('blockNumber')}")
        print(f"Success:          {receipt.get('success')}")
        print(f"Actual Gas Used:  {receipt.get('actualGasUsed')}")
        print(f"Logs:             {len(receipt.get('logs') or [])}")


async def cli_health(base_url: Optional[str]):
    """Print backend and upstream health"""
    async with BackendApiClient(base_url) as client:
        data = await client.health()

    print(f"Backend: {data.get('status')} ({data.get('timestamp')})")
    for name, service in (data.get("services") or {}).items():
        reason = f" - {service['reason']}" if service.get("reason") else ""
        print(f"  {name:<10} {service.get('status')}{reason}")


async def cli_status(user_op_hash: str, base_url: Optional[str]):
    """Single-shot status check"""
    async with BackendApiClient(base_url) as client:
        try:
            data = await client.get_status(user_op_hash)
        except AccountAbstractionError as e:
            print(f"❌ Error: {e}")
            return
    print_status(data)


async def cli_watch(user_op_hash: str, base_url: Optional[str], attempts: int, interval_ms: int):
    """Poll until the operation leaves the pending state"""
    print(f"🔍 Watching {user_op_hash} ({attempts} attempts, {interval_ms} ms apart)...")
    async with BackendApiClient(base_url) as client:
        try:
            data = await poll_until(
                lambda: client.get_status(user_op_hash),
                is_done=lambda status: status.get("status") != "pending",
                config=PollConfig.fixed(attempts, interval_ms / 1000),
                exhausted_message="UserOperation still pending after polling",
            )
        except (PollExhaustedError, AccountAbstractionError) as e:
            print(f"❌ Error: {e}")
            return
    print_status(data)


def serve(host: str, port: int):
    import uvicorn
    uvicorn.run(
        "aa_backend.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Account Abstraction backend CLI")
    parser.add_argument("--backend-url", default=None, help=f"Backend base URL (default: {settings.backend_url})")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=settings.host)
    serve_parser.add_argument("--port", type=int, default=settings.port)

    subparsers.add_parser("health", help="Show backend and upstream health")

    status_parser = subparsers.add_parser("status", help="Check a UserOperation once")
    status_parser.add_argument("hash", help="UserOperation hash")

    watch_parser = subparsers.add_parser("watch", help="Poll a UserOperation until it is included")
    watch_parser.add_argument("hash", help="UserOperation hash")
    watch_parser.add_argument("--attempts", type=int, default=settings.receipt_poll_max_attempts)
    watch_parser.add_argument("--interval-ms", type=int, default=settings.receipt_poll_interval_ms)

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    command = args.command.lower()

    if command == "serve":
        serve(args.host, args.port)

    elif command == "health":
        asyncio.run(cli_health(args.backend_url))

    elif command == "status":
        asyncio.run(cli_status(args.hash, args.backend_url))

    elif command == "watch":
        if args.attempts <= 0:
            raise ValueError("Attempts must be positive")
        asyncio.run(cli_watch(args.hash, args.backend_url, args.attempts, args.interval_ms))

    else:
        print(f"❌ Unknown command: {command}")
        parser.print_help()


if __name__ == "__main__":
    main()
