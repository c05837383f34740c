"""
token_ledger.address
====================

Account identifiers for the ledger.

An account is an opaque, immutable, comparable handle: raw `bytes` of a fixed
width (20 bytes, i.e. a 160-bit address). Callers may pass bytes-like values or
hex strings (with or without 0x); everything is normalized to `bytes` before it
touches ledger state, so `b"\\xaa" * 20` and `"0x" + "aa" * 20` name the same
account.

The all-zero identifier is reserved (`NULL_ADDRESS`). It is a well-formed
address, so it passes `to_address`, but the ledger refuses it as a transfer
recipient or an approval spender.

Examples
--------
>>> to_address("0x" + "01" * 20) == b"\\x01" * 20
True
>>> is_null(NULL_ADDRESS)
True
>>> to_hex(b"\\xab" * 20)[:6]
'0xabab'
"""

from __future__ import annotations

from typing import Final, Union

from .errors import InvalidAddress

AddressLike = Union[str, bytes, bytearray, memoryview]

ADDRESS_LEN: Final[int] = 20
NULL_ADDRESS: Final[bytes] = b"\x00" * ADDRESS_LEN


def is_byteslike(x: object) -> bool:
    return isinstance(x, (bytes, bytearray, memoryview))


def strip0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_address(value: AddressLike) -> bytes:
    """
    Normalize `value` to a canonical 20-byte address.

    Raises:
        InvalidAddress if `value` is not bytes-like/hex or has the wrong width.
    """
    if is_byteslike(value):
        raw = bytes(value)  # type: ignore[arg-type]
    elif isinstance(value, str):
        h = strip0x(value.strip())
        try:
            raw = bytes.fromhex(h)
        except ValueError as e:
            raise InvalidAddress(
                "address is not valid hex", data={"value": value[:64]}
            ) from e
    else:
        raise InvalidAddress(
            f"expected bytes or hex string, got {type(value).__name__}"
        )

    if len(raw) != ADDRESS_LEN:
        raise InvalidAddress(
            f"address must be {ADDRESS_LEN} bytes",
            data={"length": len(raw)},
        )
    return raw


def is_null(addr: AddressLike) -> bool:
    return to_address(addr) == NULL_ADDRESS


def to_hex(addr: bytes) -> str:
    """Return the lowercase 0x-prefixed hex form of an address."""
    return "0x" + bytes(addr).hex()


__all__ = [
    "AddressLike",
    "ADDRESS_LEN",
    "NULL_ADDRESS",
    "is_byteslike",
    "strip0x",
    "to_address",
    "is_null",
    "to_hex",
]
