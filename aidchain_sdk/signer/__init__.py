"""
Signing agents.

A signing agent holds key material and turns transaction bytes into a
serialized signature. It may refuse, in which case it raises
SignatureRejection.
"""
from typing import Protocol


class Signer(Protocol):
    """Protocol for signing agents"""
    address: str

    def sign_transaction(self, tx_bytes: bytes) -> str:
        """Sign serialized TransactionData and return a base64 serialized signature"""
        ...


from .local import LocalSigner  # noqa: E402
from .prompting import PromptingSigner  # noqa: E402

__all__ = ["Signer", "LocalSigner", "PromptingSigner"]
