"""
Tests for the Sui JSON-RPC client.
"""
import pytest
import requests

from aidchain_sdk.exceptions import DecodeError, LedgerError, TransportError
from aidchain_sdk.intent import OwnedObjectArg, SharedObjectArg
from aidchain_sdk.ledger import SuiLedgerClient, TransactionResult

from tests.test_helpers import TEST_OBJECT_DIGEST, TEST_RPC_URL

OBJECT_ID = "0x" + "77" * 32
OWNER = "0x" + "42" * 32


def rpc_result(result):
    return {"json": {"jsonrpc": "2.0", "id": 1, "result": result}}


def rpc_error(message, code=-32602):
    return {"json": {"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}}}


def tx_response(digest="D1", status="success", error=None):
    status_obj = {"status": status}
    if error:
        status_obj["error"] = error
    return {"digest": digest, "effects": {"status": status_obj}}


@pytest.fixture
def ledger():
    return SuiLedgerClient(TEST_RPC_URL)


def test_call_payload(ledger, requests_mock):
    requests_mock.post(TEST_RPC_URL, **rpc_result("1000"))

    assert ledger.get_reference_gas_price() == 1000
    body = requests_mock.last_request.json()
    assert body["jsonrpc"] == "2.0"
    assert body["method"] == "suix_getReferenceGasPrice"
    assert body["params"] == []


def test_request_ids_increase(ledger, requests_mock):
    requests_mock.post(TEST_RPC_URL, **rpc_result("1"))
    ledger.get_reference_gas_price()
    ledger.get_reference_gas_price()
    ids = [request.json()["id"] for request in requests_mock.request_history]
    assert ids == [1, 2]


def test_error_object(ledger, requests_mock):
    requests_mock.post(TEST_RPC_URL, **rpc_error("Invalid params"))

    with pytest.raises(LedgerError) as exc_info:
        ledger.get_object(OBJECT_ID)
    assert exc_info.value.code == -32602


def test_connection_error(ledger, requests_mock):
    requests_mock.post(TEST_RPC_URL, exc=requests.exceptions.ConnectionError("down"))
    with pytest.raises(TransportError):
        ledger.get_reference_gas_price()


def test_invalid_json(ledger, requests_mock):
    requests_mock.post(TEST_RPC_URL, text="not json")
    with pytest.raises(TransportError, match="Invalid JSON"):
        ledger.get_reference_gas_price()


def test_http_error(ledger, requests_mock):
    requests_mock.post(TEST_RPC_URL, status_code=503, text="unavailable")
    with pytest.raises(TransportError):
        ledger.get_reference_gas_price()


class TestObjectRefs:

    def test_shared_object(self, ledger, requests_mock):
        requests_mock.post(TEST_RPC_URL, **rpc_result({"data": {
            "objectId": OBJECT_ID, "version": "40", "digest": TEST_OBJECT_DIGEST,
            "owner": {"Shared": {"initial_shared_version": 12}},
        }}))

        assert ledger.get_object_ref(OBJECT_ID) == SharedObjectArg(OBJECT_ID, 12, True)
        assert ledger.get_object_ref(OBJECT_ID, mutable=False).mutable is False

    def test_owned_object(self, ledger, requests_mock):
        requests_mock.post(TEST_RPC_URL, **rpc_result({"data": {
            "objectId": OBJECT_ID, "version": "40", "digest": TEST_OBJECT_DIGEST,
            "owner": {"AddressOwner": OWNER},
        }}))

        assert ledger.get_object_ref(OBJECT_ID) == OwnedObjectArg(OBJECT_ID, 40, TEST_OBJECT_DIGEST)

    def test_missing_object(self, ledger, requests_mock):
        requests_mock.post(TEST_RPC_URL, **rpc_result({"error": {"code": "notExists"}}))
        with pytest.raises(DecodeError, match="not found"):
            ledger.get_object_ref(OBJECT_ID)

    def test_incomplete_object(self, ledger, requests_mock):
        requests_mock.post(TEST_RPC_URL, **rpc_result({"data": {"objectId": OBJECT_ID, "owner": {"AddressOwner": OWNER}}}))
        with pytest.raises(DecodeError):
            ledger.get_object_ref(OBJECT_ID)


def test_get_coins(ledger, requests_mock):
    requests_mock.post(TEST_RPC_URL, **rpc_result({"data": [
        {"coinObjectId": OBJECT_ID, "version": "3", "digest": TEST_OBJECT_DIGEST, "balance": "2500"},
        {"coinObjectId": "0x1", "balance": "10"},
    ], "hasNextPage": False}))

    coins = ledger.get_coins(OWNER)

    assert coins == [(OwnedObjectArg(OBJECT_ID, 3, TEST_OBJECT_DIGEST), 2500)]
    assert requests_mock.last_request.json()["params"] == [OWNER, "0x2::sui::SUI", None, None]


def test_get_coins_follows_pages(ledger, requests_mock):
    other = "0x" + "78" * 32
    requests_mock.post(TEST_RPC_URL, [
        rpc_result({"data": [
            {"coinObjectId": OBJECT_ID, "version": "3", "digest": TEST_OBJECT_DIGEST, "balance": "10"},
        ], "hasNextPage": True, "nextCursor": "cursor-1"}),
        rpc_result({"data": [
            {"coinObjectId": other, "version": "4", "digest": TEST_OBJECT_DIGEST, "balance": "900"},
        ], "hasNextPage": False, "nextCursor": None}),
    ])

    coins = ledger.get_coins(OWNER)

    assert [balance for _, balance in coins] == [10, 900]
    assert coins[1][0].object_id == other
    assert requests_mock.call_count == 2
    assert requests_mock.request_history[1].json()["params"][2] == "cursor-1"


def test_multi_get_objects_skips_empty(ledger, requests_mock):
    assert ledger.multi_get_objects([]) == []
    assert not requests_mock.called


def test_execute_transaction_block(ledger, requests_mock):
    requests_mock.post(TEST_RPC_URL, **rpc_result(tx_response("D9", "failure", "InsufficientGas")))

    result = ledger.execute_transaction_block("AAEC", ["sig"])

    assert result == TransactionResult(digest="D9", effects_status="failure", error="InsufficientGas")
    body = requests_mock.last_request.json()
    assert body["method"] == "sui_executeTransactionBlock"
    assert body["params"] == ["AAEC", ["sig"], {"showEffects": True}, "WaitForLocalExecution"]


def test_transaction_result_requires_digest():
    with pytest.raises(DecodeError):
        TransactionResult.from_response({"effects": {}})


class TestWaitForTransaction:

    def test_polls_until_indexed(self, ledger, requests_mock):
        requests_mock.post(TEST_RPC_URL, [
            rpc_error("Could not find the referenced transaction [TransactionDigest(D1)]."),
            rpc_result(tx_response("D1")),
        ])

        result = ledger.wait_for_transaction("D1", timeout=10)

        assert result.effects_status == "success"
        assert requests_mock.call_count == 2

    def test_keeps_polling_through_transport_errors(self, ledger, requests_mock):
        requests_mock.post(TEST_RPC_URL, [
            {"exc": requests.exceptions.ConnectionError("blip")},
            rpc_result(tx_response("D1")),
        ])
        assert ledger.wait_for_transaction("D1", timeout=10).digest == "D1"

    def test_timeout_returns_none(self, ledger, requests_mock):
        requests_mock.post(TEST_RPC_URL, **rpc_error("Could not find the referenced transaction"))
        assert ledger.wait_for_transaction("D1", timeout=0) is None

    def test_other_errors_propagate(self, ledger, requests_mock):
        requests_mock.post(TEST_RPC_URL, **rpc_error("Invalid digest", code=-32602))
        with pytest.raises(LedgerError):
            ledger.wait_for_transaction("D1", timeout=10)
