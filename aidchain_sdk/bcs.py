"""
Minimal Binary Canonical Serialization (BCS) writer.

Only the primitives needed to encode programmable transactions are
provided: unsigned integers, ULEB128 lengths, byte vectors, UTF-8 strings,
32-byte addresses, sequences and options.
"""
from typing import Callable, Iterable, Optional, TypeVar

from .utils import address_to_bytes

T = TypeVar('T')

U8_MAX = 2 ** 8 - 1
U16_MAX = 2 ** 16 - 1
U64_MAX = 2 ** 64 - 1


def _check_range(value: int, maximum: int, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} value must be an int, got {type(value).__name__}")
    if value < 0 or value > maximum:
        raise ValueError(f"{name} value out of range: {value}")


def uleb128(value: int) -> bytes:
    """Encode a non-negative integer as ULEB128 (used for lengths and enum tags)."""
    _check_range(value, 2 ** 32 - 1, "uleb128")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def u8(value: int) -> bytes:
    _check_range(value, U8_MAX, "u8")
    return value.to_bytes(1, "little")


def u16(value: int) -> bytes:
    _check_range(value, U16_MAX, "u16")
    return value.to_bytes(2, "little")


def u64(value: int) -> bytes:
    _check_range(value, U64_MAX, "u64")
    return value.to_bytes(8, "little")


def boolean(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def byte_vector(data: bytes) -> bytes:
    return uleb128(len(data)) + bytes(data)


def string(value: str) -> bytes:
    return byte_vector(value.encode("utf-8"))


def address(value: str) -> bytes:
    return address_to_bytes(value)


def sequence(items: Iterable[T], encode: Callable[[T], bytes]) -> bytes:
    """Encode a vector: ULEB128 length followed by each encoded element."""
    encoded = [encode(item) for item in items]
    return uleb128(len(encoded)) + b"".join(encoded)


def option(value: Optional[T], encode: Callable[[T], bytes]) -> bytes:
    if value is None:
        return b"\x00"
    return b"\x01" + encode(value)


def enum_tag(index: int) -> bytes:
    return uleb128(index)
