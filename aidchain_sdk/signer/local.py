"""
Local Ed25519 signing agent using Sui's signature scheme.
"""
import logging
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.serialization import Encoding, PrivateFormat, PublicFormat, NoEncryption

from ..transaction import signing_message
from ..utils import blake2b256, from_b64, to_b64

logger = logging.getLogger(__name__)

ED25519_FLAG = 0x00
_SIGNATURE_LENGTH = 64
_PUBLIC_KEY_LENGTH = 32


def address_from_public_key(public_key: bytes) -> str:
    """Derive the Sui address of an Ed25519 public key."""
    return "0x" + blake2b256(bytes([ED25519_FLAG]) + public_key).hex()


def verify_signature(tx_bytes: bytes, serialized_signature: str, address: Optional[str] = None) -> bool:
    """
    Check a serialized Ed25519 signature over transaction bytes.

    Args:
        tx_bytes: The signed TransactionData bytes
        serialized_signature: base64 of ``flag || signature || public key``
        address: If given, the public key must also derive this address

    Returns:
        True if the signature is valid for exactly these bytes
    """
    try:
        raw = from_b64(serialized_signature)
    except ValueError:
        return False
    if len(raw) != 1 + _SIGNATURE_LENGTH + _PUBLIC_KEY_LENGTH or raw[0] != ED25519_FLAG:
        return False
    signature = raw[1:1 + _SIGNATURE_LENGTH]
    public_key = raw[1 + _SIGNATURE_LENGTH:]
    if address is not None and address_from_public_key(public_key) != address.lower():
        return False
    try:
        Ed25519PublicKey.from_public_bytes(public_key).verify(signature, signing_message(tx_bytes))
        return True
    except InvalidSignature:
        return False


class LocalSigner:
    """
    Signer backed by an in-memory Ed25519 key.

    Signatures follow Sui's format: the key signs blake2b256 of the intent
    message ``[0, 0, 0] || tx_bytes`` and the result is serialized as
    base64 of ``0x00 || signature || public key``.
    """

    def __init__(self, private_key: Union[Ed25519PrivateKey, bytes, str]):
        """
        Args:
            private_key: An Ed25519PrivateKey, 32 raw bytes, 64 hex chars
                (optionally 0x-prefixed), or a base64 Sui keystore entry
                (flag byte followed by the 32-byte seed)

        Raises:
            ValueError: If the key cannot be parsed
        """
        if isinstance(private_key, Ed25519PrivateKey):
            self._key = private_key
        else:
            self._key = Ed25519PrivateKey.from_private_bytes(self._parse_seed(private_key))
        self.public_key = self._key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        self.address = address_from_public_key(self.public_key)

    @classmethod
    def generate(cls) -> "LocalSigner":
        return cls(Ed25519PrivateKey.generate())

    @staticmethod
    def _parse_seed(value: Union[bytes, str]) -> bytes:
        if isinstance(value, bytes):
            seed = value
        else:
            text = value.strip()
            hex_text = text[2:] if text.startswith("0x") else text
            if len(hex_text) == 64:
                try:
                    seed = bytes.fromhex(hex_text)
                except ValueError:
                    seed = b""
            else:
                seed = b""
            if not seed:
                try:
                    decoded = from_b64(text)
                except ValueError:
                    raise ValueError("Private key must be hex or base64 encoded")
                if len(decoded) == 33:
                    if decoded[0] != ED25519_FLAG:
                        raise ValueError("Only Ed25519 keys are supported")
                    decoded = decoded[1:]
                seed = decoded
        if len(seed) != 32:
            raise ValueError(f"Ed25519 seed must be 32 bytes, got {len(seed)}")
        return seed

    def export_private_key(self) -> str:
        """Export the key as a base64 Sui keystore entry."""
        seed = self._key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
        return to_b64(bytes([ED25519_FLAG]) + seed)

    def sign_transaction(self, tx_bytes: bytes) -> str:
        """
        Sign TransactionData bytes.

        Args:
            tx_bytes: BCS TransactionData

        Returns:
            Serialized signature (base64)
        """
        signature = self._key.sign(signing_message(bytes(tx_bytes)))
        logger.debug(f"Signed {len(tx_bytes)} transaction bytes as {self.address[:10]}...")
        return to_b64(bytes([ED25519_FLAG]) + signature + self.public_key)
