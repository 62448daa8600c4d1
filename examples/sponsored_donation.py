#!/usr/bin/env python3
"""
Donate through the sponsor relay so the donor pays no gas.
"""
import os
import sys

from aidchain_sdk import AidChainClient, AidChainConfig, LocalSigner


def main():
    """
    Demonstrate a sponsored donation.

    Requires SUI_PRIVATE_KEY and SPONSOR_BACKEND_URL; the relay must be running
    (see run_relay.py).
    """
    private_key = os.environ.get("SUI_PRIVATE_KEY")
    if not private_key:
        print("ERROR: SUI_PRIVATE_KEY environment variable is required")
        return 1

    os.environ.setdefault("SPONSORED_TX_ENABLED", "true")
    config = AidChainConfig.from_env()
    client = AidChainClient(LocalSigner(private_key), config=config)
    print(f"Donor: {client.address}")
    print(f"Relay: {config.sponsor_backend_url}")

    outcome = client.donate(
        description="Winter blankets for 20 families",
        location="Hatay",
        amount=os.environ.get("DONATION_SUI", "0.1"),
    )
    print(outcome.message)
    if outcome.digest:
        print(f"Explorer: {client.explorer_url(outcome.digest)}")
    if outcome.retryable:
        print("The relay could not be reached or refused sponsorship; try again later")
    return 0 if outcome.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
