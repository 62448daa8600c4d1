"""
Shared constants and builders for the AidChain SDK tests.
"""
import base58

from aidchain_sdk import bcs
from aidchain_sdk.config import AidChainConfig
from aidchain_sdk.intent import OwnedObjectArg, TransactionIntent
from aidchain_sdk.models import SponsorshipGrant
from aidchain_sdk.transaction import build_transaction_kind, transaction_digest
from aidchain_sdk.utils import from_b64, to_b64

# Test constants used throughout tests
TEST_RPC_URL = "https://rpc.example.com"
TEST_RELAY_URL = "http://relay.example.com"
TEST_ENOKI_URL = "https://enoki.example.com/v1"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_PACKAGE = "0x" + "ab" * 32
TEST_REGISTRY = "0x" + "cd" * 32
TEST_COORDINATOR = "0x" + "ef" * 32
TEST_SPONSOR = "0x" + "5a" * 32
TEST_OBJECT_DIGEST = base58.b58encode(bytes(range(32))).decode("ascii")

TEST_CONFIG = AidChainConfig(
    network="testnet",
    package_id=TEST_PACKAGE,
    registry_id=TEST_REGISTRY,
    registry_initial_shared_version=7,
    coordinator_address=TEST_COORDINATOR,
    sponsor_backend_url=TEST_RELAY_URL,
    sponsored_enabled=True,
)

FUNDING_COIN = OwnedObjectArg(object_id="0x" + "11" * 32, version=5, digest=TEST_OBJECT_DIGEST)
OTHER_COIN = OwnedObjectArg(object_id="0x" + "22" * 32, version=9, digest=TEST_OBJECT_DIGEST)

REGISTRATION = dict(
    name="Amina",
    location="Gaziantep",
    need_category="Food",
    national_id="12345678901",
    phone="+905551112233",
)


def sponsor_transaction_bytes(kind_b64: str, sender: str, price: int = 1000, budget: int = 50_000_000) -> bytes:
    """Wrap transaction kind bytes the way a sponsor does: TransactionData::V1 paid by TEST_SPONSOR."""
    return (
        bcs.enum_tag(0)
        + from_b64(kind_b64)
        + bcs.address(sender)
        + bcs.uleb128(0)  # gas coins are chosen by the provider
        + bcs.address(TEST_SPONSOR)
        + bcs.u64(price)
        + bcs.u64(budget)
        + bcs.enum_tag(0)
    )


def grant_for_kind(kind_b64: str, sender: str) -> SponsorshipGrant:
    tx_bytes = sponsor_transaction_bytes(kind_b64, sender)
    return SponsorshipGrant(bytes=to_b64(tx_bytes), digest=transaction_digest(tx_bytes))


def make_grant(intent: TransactionIntent) -> SponsorshipGrant:
    """Build the grant a sponsor would return for ``intent``."""
    return grant_for_kind(to_b64(build_transaction_kind(intent)), intent.sender)


def sponsor_from_request(request) -> SponsorshipGrant:
    """side_effect for a mocked RelayClient.create_grant"""
    return grant_for_kind(request.transaction_kind_bytes, request.sender)


def move_object_response(object_id: str, fields: dict, owner=None) -> dict:
    """A ``sui_getObject`` response for a Move object with the given fields."""
    data = {
        "objectId": object_id,
        "version": "12",
        "digest": TEST_OBJECT_DIGEST,
        "content": {"dataType": "moveObject", "type": f"{TEST_PACKAGE}::aidchain::Object", "fields": fields},
    }
    if owner is not None:
        data["owner"] = owner
    return {"data": data}
