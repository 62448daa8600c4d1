"""
Client for the Enoki sponsored-transaction REST API.

This is the upstream sponsor provider. It is called with the relay's
private API key, which never appears in logs or responses.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import DEFAULT_ENOKI_API_URL
from ..exceptions import AmbiguousStatus, ExecutionFailure, SponsorshipError, UpstreamError

logger = logging.getLogger(__name__)


class EnokiClient:
    """
    Minimal Enoki client for creating and executing sponsored transactions.

    Requests are sent exactly once: no retry adapter is mounted, because
    replaying an execute call is never safe at this layer.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_ENOKI_API_URL,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        if not api_key:
            raise ValueError("Enoki API key is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def create_sponsored_transaction(
        self,
        network: str,
        transaction_kind_bytes: str,
        sender: str,
        allowed_move_call_targets: List[str]
    ) -> Dict[str, str]:
        """
        Ask Enoki to fund a transaction kind.

        Returns:
            Dictionary with ``bytes`` (base64 TransactionData) and ``digest``

        Raises:
            SponsorshipError: If Enoki rejects the request or cannot be reached
        """
        body = {
            "network": network,
            "transactionBlockKindBytes": transaction_kind_bytes,
            "sender": sender,
            "allowedMoveCallTargets": allowed_move_call_targets,
        }
        data = self._post("/transaction-blocks/sponsor", body, SponsorshipError)
        return {"bytes": data.get("bytes"), "digest": data.get("digest")}

    def execute_sponsored_transaction(self, digest: str, signature: str) -> Dict[str, str]:
        """
        Submit the user's signature for a sponsored transaction.

        Returns:
            Dictionary with the executed ``digest``

        Raises:
            ExecutionFailure: If Enoki rejects the execution or cannot be reached
            AmbiguousStatus: If the request was sent but Enoki's answer was lost
                or unreadable
        """
        data = self._post(
            f"/transaction-blocks/sponsor/{digest}", {"signature": signature}, ExecutionFailure,
            submitted_digest=digest,
        )
        return {"digest": data.get("digest")}

    def _post(
        self,
        path: str,
        body: Dict[str, Any],
        error_cls: type,
        submitted_digest: Optional[str] = None
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
        except requests.Timeout as e:
            self.logger.error(f"Enoki request to {path} timed out: {e}")
            if submitted_digest and not isinstance(e, requests.ConnectTimeout):
                raise AmbiguousStatus(f"No answer from sponsor provider for {submitted_digest}", submitted_digest) from e
            raise error_cls(f"Sponsor provider unreachable: {e}") from e
        except requests.RequestException as e:
            self.logger.error(f"Enoki request to {path} failed: {e}")
            raise error_cls(f"Sponsor provider unreachable: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            if submitted_digest and response.status_code >= 500:
                raise AmbiguousStatus(
                    f"Sponsor provider returned HTTP {response.status_code} without a body for {submitted_digest}",
                    submitted_digest,
                )
            payload = {}

        if not response.ok:
            raise self._error_from_response(response.status_code, payload, error_cls)

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise error_cls(f"Malformed response from sponsor provider: {payload!r}")
        return payload["data"]

    @staticmethod
    def _error_from_response(status_code: int, payload: Any, error_cls: type) -> UpstreamError:
        errors = payload.get("errors") if isinstance(payload, dict) else None
        details = errors if isinstance(errors, list) else []
        message = None
        if details and isinstance(details[0], dict):
            message = details[0].get("message")
        if not message and isinstance(payload, dict):
            message = payload.get("message") or payload.get("error")
        return error_cls(message or f"Sponsor provider returned HTTP {status_code}", details)
