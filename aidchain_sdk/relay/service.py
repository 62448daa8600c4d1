"""
Stateless relay services.

SponsorRelay turns a transaction kind into a funded grant; ExecutionRelay
submits a signed grant. Neither keeps any record of past requests, so
concurrent requests need no locking and a crash simply requires the client
to start a new flow.
"""
import logging
from typing import Dict, List, Optional, Protocol

from .._rate_limited_log import rate_limited_log
from ..config import WILDCARD_TARGET
from ..exceptions import (
    AmbiguousStatus, ExecutionFailure, MissingFieldsError, ProtocolViolation, SponsorshipError,
    UpstreamError, WildcardNotPermittedError
)
from ..models import SponsorshipGrant, SponsorshipRequest

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "testnet"


class SponsorProvider(Protocol):
    """Upstream provider interface (implemented by EnokiClient)"""

    def create_sponsored_transaction(
        self,
        network: str,
        transaction_kind_bytes: str,
        sender: str,
        allowed_move_call_targets: List[str]
    ) -> Dict[str, str]:
        ...

    def execute_sponsored_transaction(self, digest: str, signature: str) -> Dict[str, str]:
        ...


class SponsorRelay:
    """
    Obtains sponsorship grants from the upstream provider.

    The allow-list is the only authorization boundary: the relay does not
    look inside the transaction, it forwards the allow-list unchanged and
    the provider enforces it.
    """

    def __init__(
        self,
        provider: SponsorProvider,
        allow_wildcard: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        self.provider = provider
        self.allow_wildcard = allow_wildcard
        self.logger = logger or logging.getLogger(__name__)

    def create_grant(self, request: SponsorshipRequest) -> SponsorshipGrant:
        """
        Create a sponsored transaction for the request.

        Args:
            request: Sponsorship request from the client

        Returns:
            Grant with the funded transaction bytes and digest

        Raises:
            MissingFieldsError: If sender or transaction bytes are missing, or
                no allow-list was supplied and wildcards are disabled
            WildcardNotPermittedError: If "*" is requested but not permitted
            SponsorshipError: If the provider rejects the request
        """
        missing = [
            name for name, value in (
                ("transactionKindBytes", request.transaction_kind_bytes),
                ("sender", request.sender),
            ) if not value
        ]
        if missing:
            raise MissingFieldsError("Missing required fields", missing)

        allowed = self._resolve_allow_list(request.allowed_move_call_targets)
        network = request.network or DEFAULT_NETWORK

        self.logger.info(f"Sponsoring transaction for: {request.sender}")
        try:
            response = self.provider.create_sponsored_transaction(
                network=network,
                transaction_kind_bytes=request.transaction_kind_bytes,
                sender=request.sender,
                allowed_move_call_targets=allowed,
            )
        except UpstreamError as e:
            rate_limited_log(f"Sponsor error: {e}", level="error", logger_instance=self.logger)
            if isinstance(e, SponsorshipError):
                raise
            raise SponsorshipError(str(e), e.details) from e

        if not response.get("bytes") or not response.get("digest"):
            raise SponsorshipError("Sponsor provider returned an incomplete grant")

        grant = SponsorshipGrant(bytes=response["bytes"], digest=response["digest"])
        self.logger.info(f"Sponsored transaction created: {grant.digest}")
        return grant

    def _resolve_allow_list(self, targets: Optional[List[str]]) -> List[str]:
        if not targets:
            if not self.allow_wildcard:
                raise MissingFieldsError("Missing allowedMoveCallTargets", ["allowedMoveCallTargets"])
            targets = [WILDCARD_TARGET]
        if WILDCARD_TARGET in targets:
            if not self.allow_wildcard:
                raise WildcardNotPermittedError("Wildcard allow-list is not permitted by this relay")
            rate_limited_log(
                "Sponsoring with a wildcard allow-list: any Move call may be gas-sponsored",
                level="warning",
                logger_instance=self.logger,
            )
        return targets


class ExecutionRelay:
    """Submits signed grants through the upstream provider, exactly once."""

    def __init__(self, provider: SponsorProvider, logger: Optional[logging.Logger] = None):
        self.provider = provider
        self.logger = logger or logging.getLogger(__name__)

    def execute(self, digest: Optional[str], signature: Optional[str]) -> str:
        """
        Execute a signed sponsored transaction.

        Args:
            digest: Digest of the grant that was signed
            signature: Serialized user signature

        Returns:
            Digest of the executed transaction (equal to ``digest``)

        Raises:
            MissingFieldsError: If digest or signature is missing
            ExecutionFailure: If the provider rejects the execution; an
                expired grant also surfaces here and needs a new grant
            AmbiguousStatus: If the provider may have executed the grant but its
                answer was lost
            ProtocolViolation: If the provider reports a different digest
        """
        missing = [name for name, value in (("digest", digest), ("signature", signature)) if not value]
        if missing:
            raise MissingFieldsError("Missing digest or signature", missing)

        self.logger.info(f"Executing sponsored transaction: {digest}")
        try:
            response = self.provider.execute_sponsored_transaction(digest=digest, signature=signature)
        except UpstreamError as e:
            rate_limited_log(f"Execute error: {e}", level="error", logger_instance=self.logger)
            if isinstance(e, ExecutionFailure):
                raise
            raise ExecutionFailure(str(e), e.details, digest=digest) from e
        except AmbiguousStatus as e:
            self.logger.warning(f"Execution of {digest} unconfirmed: {e}")
            raise

        final_digest = response.get("digest")
        if final_digest != digest:
            self.logger.error(f"Provider executed {final_digest} for grant {digest}")
            raise ProtocolViolation(f"Executed digest {final_digest} does not match signed grant {digest}")

        self.logger.info(f"Transaction executed: {final_digest}")
        return final_digest
