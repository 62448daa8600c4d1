"""
Client for the sponsor relay's HTTP endpoints.
"""
import logging
from typing import Any, Dict, Optional

import requests

from .exceptions import (
    AmbiguousStatus, ExecutionFailure, MissingFieldsError, RelayRequestError,
    SponsorshipError, TransportError
)
from .models import SignedSponsorship, SponsorshipGrant, SponsorshipRequest

logger = logging.getLogger(__name__)


class RelayClient:
    """
    Talks to ``/api/sponsor`` and ``/api/execute`` on the sponsor relay.

    Each call is a single attempt. Failures are mapped to SDK exceptions so
    the flow coordinator can tell transport problems (nothing submitted)
    from upstream rejections.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def create_grant(self, request: SponsorshipRequest) -> SponsorshipGrant:
        """
        Request a sponsorship grant.

        Raises:
            TransportError: If the relay cannot be reached
            RelayRequestError: If the relay rejects the request as malformed
            SponsorshipError: If the sponsor provider refuses the request
        """
        try:
            response = self.session.post(
                f"{self.base_url}/api/sponsor",
                json=request.to_wire(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Sponsor relay unreachable: {e}")
            raise TransportError(f"Could not reach sponsor relay at {self.base_url}: {e}") from e

        data = self._json(response)
        if response.status_code == 400:
            raise self._request_error(data)
        if not response.ok:
            raise SponsorshipError(data.get("error") or "Sponsor request failed", data.get("details"))

        try:
            return SponsorshipGrant.model_validate(data)
        except ValueError as e:
            raise SponsorshipError(f"Malformed grant from relay: {e}")

    def execute(self, signed: SignedSponsorship) -> str:
        """
        Execute a signed grant.

        Returns:
            Digest reported by the relay

        Raises:
            TransportError: If the request could not be delivered
            AmbiguousStatus: If the request was sent but no usable answer arrived,
                including gateway errors and non-JSON replies
            RelayRequestError: If the relay rejects the request as malformed
            ExecutionFailure: If the upstream refuses or fails the execution
        """
        try:
            response = self.session.post(
                f"{self.base_url}/api/execute",
                json=signed.model_dump(),
                timeout=self.timeout,
            )
        except requests.ConnectionError as e:
            # Includes ConnectTimeout: the request never left this process
            raise TransportError(f"Could not reach sponsor relay at {self.base_url}: {e}") from e
        except requests.Timeout as e:
            raise AmbiguousStatus(f"No response from relay after submitting {signed.digest}", signed.digest) from e
        except requests.RequestException as e:
            raise TransportError(f"Execute request failed: {e}") from e

        try:
            data = self._json(response)
        except TransportError as e:
            # The signed grant was delivered; it may have executed
            raise AmbiguousStatus(f"{e} after submitting {signed.digest}", signed.digest) from e
        if response.status_code == 400:
            raise self._request_error(data)
        if response.status_code > 500:
            raise AmbiguousStatus(
                f"Relay gateway error (HTTP {response.status_code}) after submitting {signed.digest}",
                signed.digest,
            )
        if not response.ok:
            raise ExecutionFailure(
                data.get("error") or "Execute request failed",
                data.get("details"),
                digest=signed.digest,
            )
        digest = data.get("digest")
        if not digest:
            raise AmbiguousStatus("Relay answered without a digest", signed.digest)
        return digest

    def _json(self, response: requests.Response) -> Dict[str, Any]:
        content_type = response.headers.get("Content-Type", "")
        if "application/json" not in content_type:
            self.logger.warning(f"Unexpected Content-Type: {content_type} (expected application/json)")
        try:
            data = response.json()
        except ValueError:
            raise TransportError(f"Relay returned a non-JSON response (HTTP {response.status_code})")
        if not isinstance(data, dict):
            raise TransportError(f"Relay returned unexpected JSON: {data!r}")
        return data

    @staticmethod
    def _request_error(data: Dict[str, Any]) -> RelayRequestError:
        message = data.get("error") or "Invalid relay request"
        if message.lower().startswith("missing"):
            return MissingFieldsError(message)
        return RelayRequestError(message)
