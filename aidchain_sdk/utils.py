"""
Shared helpers for encoding, hashing and address handling.
"""
import base64
import binascii
import hashlib
from typing import Any, Dict, Iterable

SUI_ADDRESS_LENGTH = 32


def blake2b256(data: bytes) -> bytes:
    """Return the 32-byte BLAKE2b digest used throughout Sui."""
    return hashlib.blake2b(data, digest_size=32).digest()


def sha256_hex(data: str) -> str:
    """Return the lowercase hex SHA-256 digest of a UTF-8 string."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def to_b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def from_b64(data: str) -> bytes:
    """
    Decode standard base64 text.

    Raises:
        ValueError: If the text is not valid base64
    """
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, TypeError) as e:
        raise ValueError(f"Invalid base64 data: {e}")


def normalize_sui_address(value: str) -> str:
    """
    Normalize a Sui address or object id to 0x-prefixed, 64 lowercase hex chars.

    Short forms such as ``0x2`` are left-padded with zeros.

    Args:
        value: Address string with or without 0x prefix

    Returns:
        Normalized address

    Raises:
        ValueError: If the value is empty, too long or not hexadecimal
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Address must be a non-empty string")
    raw = value.strip().lower()
    if raw.startswith("0x"):
        raw = raw[2:]
    if not raw or len(raw) > SUI_ADDRESS_LENGTH * 2:
        raise ValueError(f"Invalid address length: {value}")
    try:
        int(raw, 16)
    except ValueError:
        raise ValueError(f"Address is not hexadecimal: {value}")
    return "0x" + raw.rjust(SUI_ADDRESS_LENGTH * 2, "0")


def address_to_bytes(value: str) -> bytes:
    return bytes.fromhex(normalize_sui_address(value)[2:])


def redact(value: Any) -> str:
    """Describe a secret value for logs without revealing it."""
    return f"[REDACTED - {len(str(value))} chars]"


def sanitize_for_logging(payload: Dict[str, Any], secret_keys: Iterable[str]) -> Dict[str, Any]:
    """
    Copy a payload with the given keys replaced by redaction markers.

    Args:
        payload: Request or response body
        secret_keys: Keys whose values must not be logged

    Returns:
        Sanitized copy for safe logging
    """
    if not isinstance(payload, dict):
        return {"type": str(type(payload))}
    result = payload.copy()
    for key in secret_keys:
        if key in result and result[key] is not None:
            result[key] = redact(result[key])
    return result
