"""
Signing agent that asks a human before delegating to another signer.
"""
import logging
from typing import Callable, Optional

from ..exceptions import SignatureRejection
from ..transaction import transaction_digest

logger = logging.getLogger(__name__)


def console_confirm(address: str, digest: str) -> bool:
    """Ask on the terminal whether to sign; blocks until the user answers."""
    answer = input(f"Sign transaction {digest} as {address}? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


class PromptingSigner:
    """
    Wraps a signer behind a confirmation callback.

    The callback receives the signer address and the digest of the bytes
    to be signed. It may block for as long as the user needs; no timeout
    is applied here.
    """

    def __init__(self, inner, confirm: Optional[Callable[[str, str], bool]] = None):
        self.inner = inner
        self.address = inner.address
        self.confirm = confirm or console_confirm

    def sign_transaction(self, tx_bytes: bytes) -> str:
        """
        Raises:
            SignatureRejection: If the user declines
        """
        digest = transaction_digest(tx_bytes)
        if not self.confirm(self.address, digest):
            logger.info(f"User declined to sign {digest}")
            raise SignatureRejection(f"User rejected signing transaction {digest}")
        return self.inner.sign_transaction(tx_bytes)
