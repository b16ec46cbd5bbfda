"""Amiibo Forge - Derived Field Functions."""
from __future__ import annotations

import secrets
import string

from .errors import ValidationError
from .protocol import CASCADE_TAG, PACK, PWD_MASK, UID_PREFIX, UID_SIZE

_HEX = frozenset(string.hexdigits)


def parse_hex(text: str, size: int, what: str) -> bytes:
    """Parse exactly `size` bytes of hex, no separators."""
    if len(text) != size * 2 or not set(text) <= _HEX:
        raise ValidationError(f"{what} must be exactly {size * 2} hex characters ({size} bytes)")
    return bytes.fromhex(text)


def random_uid() -> bytes:
    """NXP-prefixed 7-byte UID with 6 bytes from the OS CSPRNG."""
    return bytes([UID_PREFIX]) + secrets.token_bytes(UID_SIZE - 1)


def parse_custom_uid(uid_hex: str) -> bytes:
    # byte 0 is deliberately not checked against UID_PREFIX
    return parse_hex(uid_hex, UID_SIZE, "UID")


def bcc0(uid: bytes) -> int:
    return uid[0] ^ uid[1] ^ uid[2] ^ CASCADE_TAG


def pack_uid(uid: bytes) -> bytes:
    """[u0, u1, u2, BCC0, u3, u4, u5, u6]"""
    return bytes(uid[:3]) + bytes([bcc0(uid)]) + bytes(uid[3:7])


def unpack_uid(packed: bytes) -> bytes:
    """Recover the 7-byte UID from a packed UID, skipping the BCC0 slot."""
    return bytes(packed[0:3]) + bytes(packed[4:8])


def position8(packed: bytes) -> int:
    return packed[4] ^ packed[5] ^ packed[6] ^ packed[7]


def pwd4(packed: bytes) -> bytes:
    """Derive the 4-byte tag password from the packed UID."""
    uid = unpack_uid(packed)
    return bytes(mask ^ uid[i + 1] ^ uid[i + 3] for i, mask in enumerate(PWD_MASK))


def pack2() -> bytes:
    return PACK
