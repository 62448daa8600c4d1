"""
SignatureCoordinator - obtains a user signature for exactly one grant.
"""
import logging
import threading
from typing import Optional

from cachetools import TTLCache

from .exceptions import GrantReuseError, ProtocolViolation, SignatureRejection
from .models import SignedSponsorship, SponsorshipGrant
from .signer import Signer
from .transaction import transaction_digest

logger = logging.getLogger(__name__)


class SignatureCoordinator:
    """
    Binds a signature to the exact bytes of a sponsorship grant.

    Before asking the signing agent, the coordinator recomputes the digest
    of the grant bytes and refuses to continue if it differs from the digest
    the relay reported. Each digest may be presented for signing once; the
    record is kept for ``memory_seconds``, well past any grant lifetime.
    """

    def __init__(
        self,
        signer: Signer,
        memory_seconds: int = 3600,
        max_tracked: int = 1024,
        logger: Optional[logging.Logger] = None
    ):
        self.signer = signer
        self.logger = logger or logging.getLogger(__name__)
        self._attempted = TTLCache(maxsize=max_tracked, ttl=memory_seconds)
        self._lock = threading.Lock()

    @property
    def address(self) -> str:
        return self.signer.address

    def sign(self, grant: SponsorshipGrant) -> SignedSponsorship:
        """
        Ask the signing agent to sign a grant.

        This call waits for the signing agent without a timeout; a human may
        be reviewing the transaction.

        Args:
            grant: Grant returned by the sponsor relay

        Returns:
            Digest and signature, ready for execution

        Raises:
            ProtocolViolation: If the grant bytes do not match its digest
            GrantReuseError: If this grant was already presented for signing
            SignatureRejection: If the signing agent declines
        """
        try:
            tx_bytes = grant.raw_bytes()
        except ValueError as e:
            raise ProtocolViolation(f"Grant bytes are not valid base64: {e}")

        computed = transaction_digest(tx_bytes)
        if computed != grant.digest:
            raise ProtocolViolation(
                f"Grant digest mismatch: relay reported {grant.digest}, bytes hash to {computed}"
            )

        with self._lock:
            if grant.digest in self._attempted:
                raise GrantReuseError(f"Grant {grant.digest} was already presented for signing")
            self._attempted[grant.digest] = True

        signature = self._request_signature(tx_bytes, grant.digest)
        return SignedSponsorship(digest=grant.digest, signature=signature)

    def sign_direct(self, tx_bytes: bytes) -> str:
        """
        Sign self-funded TransactionData bytes.

        Raises:
            SignatureRejection: If the signing agent declines
        """
        return self._request_signature(tx_bytes, transaction_digest(tx_bytes))

    def _request_signature(self, tx_bytes: bytes, digest: str) -> str:
        self.logger.info(f"Requesting signature for {digest} from {self.signer.address[:10]}...")
        signature = self.signer.sign_transaction(tx_bytes)
        if not signature:
            raise SignatureRejection(f"Signing agent returned no signature for {digest}")
        return signature
