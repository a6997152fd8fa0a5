#!/usr/bin/env python3
"""
Generate a fresh EOA to use as the Smart Account signer.

Usage:
    python scripts/generate_eoa.py
"""

from eth_account import Account


def main() -> None:
    account = Account.create()
    private_key = account.key.hex()
    if not private_key.startswith("0x"):
        private_key = f"0x{private_key}"

    print("=" * 66)
    print("Created a new EOA")
    print("=" * 66)
    print(f"Private Key: {private_key}")
    print(f"Address:     {account.address}")
    print("=" * 66)
    print()
    print("Keep this private key secret. Losing it means losing access to")
    print("anything owned by this address.")


if __name__ == "__main__":
    main()
