#!/usr/bin/env python3
"""
Register a recipient with supporting evidence, then list unverified profiles.
"""
import os
import sys

from aidchain_sdk import AidChainClient, LocalSigner, StorageError, ValidationError


def main():
    private_key = os.environ.get("SUI_PRIVATE_KEY")
    if not private_key:
        print("ERROR: SUI_PRIVATE_KEY environment variable is required")
        return 1

    client = AidChainClient(LocalSigner(private_key))

    evidence = None
    evidence_path = os.environ.get("EVIDENCE_FILE")
    if evidence_path:
        with open(evidence_path, "rb") as f:
            evidence = f.read()

    try:
        outcome = client.register_recipient(
            name="Amina Yilmaz",
            location="Gaziantep",
            need_category="Shelter",
            national_id="12345678901",
            phone="+905551112233",
            family_size=4,
            description="House damaged, staying with relatives",
            evidence=evidence,
        )
    except ValidationError as e:
        print(f"Invalid registration: {e}")
        return 1
    except StorageError as e:
        print(f"Evidence upload failed: {e}")
        return 1

    print(outcome.message)
    if outcome.digest:
        print(f"Explorer: {client.explorer_url(outcome.digest)}")

    for profile in client.load_unverified_recipients():
        print(f"  {profile.id}  {profile.name} ({profile.location}, {profile.need_category})")
    return 0 if outcome.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
