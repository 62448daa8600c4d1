"""
Sui fullnode JSON-RPC client.

Covers the reads the SDK needs (objects, coins, gas price, transaction
effects) and direct submission of signed transactions.
"""
import itertools
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests
from pydantic import BaseModel
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import DecodeError, LedgerError, TransportError
from .intent import ObjectArg, OwnedObjectArg, SharedObjectArg

logger = logging.getLogger(__name__)

SUI_COIN_TYPE = "0x2::sui::SUI"
# Returned while a transaction is not yet indexed by the node
_NOT_FOUND_MARKERS = ("could not find", "not found")


class TransactionResult(BaseModel):
    """Digest and effects status of a submitted transaction"""
    digest: str
    effects_status: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "TransactionResult":
        """
        Build from a ``SuiTransactionBlockResponse``.

        Raises:
            DecodeError: If the response has no digest
        """
        if not isinstance(response, dict) or not response.get("digest"):
            raise DecodeError(f"Transaction response without digest: {response!r}")
        effects = response.get("effects") or {}
        status = effects.get("status") or {}
        return cls(
            digest=response["digest"],
            effects_status=status.get("status"),
            error=status.get("error"),
        )


class SuiLedgerClient:
    """
    JSON-RPC client for a Sui fullnode.

    Read calls go through a session with retries on 5xx and connection
    errors. Transaction submission uses a separate session without retries.
    """

    def __init__(
        self,
        rpc_url: str,
        retry_count: int = 3,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._ids = itertools.count(1)

        self.session = requests.Session()
        retries = Retry(
            total=retry_count,
            backoff_factor=0.5,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["POST"],
            raise_on_status=False,
            connect=retry_count,
            read=retry_count,
            other=retry_count
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))
        self.submit_session = requests.Session()

    def call(self, method: str, params: Sequence[Any], session: Optional[requests.Session] = None) -> Any:
        """
        Perform a JSON-RPC call.

        Raises:
            TransportError: If the node cannot be reached or answers garbage
            LedgerError: If the node returns a JSON-RPC error object
        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": list(params)}
        try:
            response = (session or self.session).post(self.rpc_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except ValueError as e:
            # requests raises a JSONDecodeError that is also a RequestException
            raise TransportError(f"Invalid JSON from Sui RPC {method}: {e}") from e
        except requests.RequestException as e:
            self.logger.error(f"RPC {method} failed: {e}")
            raise TransportError(f"Sui RPC {method} failed: {e}") from e

        if "error" in body and body["error"]:
            error = body["error"]
            raise LedgerError(error.get("message", str(error)), error.get("code"))
        return body.get("result")

    def get_object(self, object_id: str, show_owner: bool = False) -> Dict[str, Any]:
        options = {"showContent": True, "showOwner": show_owner}
        return self.call("sui_getObject", [object_id, options])

    def multi_get_objects(self, object_ids: List[str]) -> List[Dict[str, Any]]:
        if not object_ids:
            return []
        return self.call("sui_multiGetObjects", [object_ids, {"showContent": True, "showOwner": True}])

    def get_object_ref(self, object_id: str, mutable: bool = True) -> ObjectArg:
        """
        Resolve an object id into a transaction argument.

        Shared objects become SharedObjectArg; owned and immutable objects
        become OwnedObjectArg at their current version.

        Raises:
            DecodeError: If the object is missing or lacks ownership data
        """
        response = self.call("sui_getObject", [object_id, {"showOwner": True}])
        data = (response or {}).get("data")
        if not data:
            raise DecodeError(f"Object {object_id} not found: {(response or {}).get('error')}")
        owner = data.get("owner")
        try:
            if isinstance(owner, dict) and "Shared" in owner:
                return SharedObjectArg(
                    object_id=data["objectId"],
                    initial_shared_version=int(owner["Shared"]["initial_shared_version"]),
                    mutable=mutable,
                )
            return OwnedObjectArg(
                object_id=data["objectId"],
                version=int(data["version"]),
                digest=data["digest"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Cannot resolve reference for {object_id}: {e}")

    def get_reference_gas_price(self) -> int:
        return int(self.call("suix_getReferenceGasPrice", []))

    def get_coins(self, owner: str, coin_type: str = SUI_COIN_TYPE) -> List[Tuple[OwnedObjectArg, int]]:
        """Return (reference, balance) pairs for all of the owner's coins, following pagination."""
        coins = []
        cursor = None
        while True:
            result = self.call("suix_getCoins", [owner, coin_type, cursor, None]) or {}
            for entry in result.get("data", []):
                try:
                    ref = OwnedObjectArg(
                        object_id=entry["coinObjectId"],
                        version=int(entry["version"]),
                        digest=entry["digest"],
                    )
                    coins.append((ref, int(entry["balance"])))
                except (KeyError, TypeError, ValueError) as e:
                    self.logger.warning(f"Skipping malformed coin entry {entry!r}: {e}")
            next_cursor = result.get("nextCursor")
            if not result.get("hasNextPage") or not next_cursor or next_cursor == cursor:
                return coins
            cursor = next_cursor

    def execute_transaction_block(self, tx_bytes_b64: str, signatures: List[str]) -> TransactionResult:
        """
        Submit a signed transaction once and return its effects.

        Raises:
            TransportError: If the node cannot be reached
            LedgerError: If the node rejects the transaction before execution
        """
        response = self.call(
            "sui_executeTransactionBlock",
            [tx_bytes_b64, signatures, {"showEffects": True}, "WaitForLocalExecution"],
            session=self.submit_session,
        )
        return TransactionResult.from_response(response)

    def get_transaction_block(self, digest: str) -> TransactionResult:
        response = self.call("sui_getTransactionBlock", [digest, {"showEffects": True}])
        return TransactionResult.from_response(response)

    def wait_for_transaction(
        self,
        digest: str,
        timeout: float = 60,
        poll_interval: float = 1.0
    ) -> Optional[TransactionResult]:
        """
        Poll until the transaction's effects are available.

        Returns:
            The result, or None if effects did not appear within ``timeout``
        """
        deadline = time.monotonic() + timeout
        while True:
            try:
                return self.get_transaction_block(digest)
            except LedgerError as e:
                if not any(marker in str(e).lower() for marker in _NOT_FOUND_MARKERS):
                    raise
            except TransportError as e:
                self.logger.warning(f"Polling {digest} failed: {e}")
            if time.monotonic() >= deadline:
                self.logger.warning(f"Effects for {digest} not available after {timeout}s")
                return None
            time.sleep(poll_interval)
