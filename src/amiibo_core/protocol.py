"""Amiibo tag protocol constants.

Single source of truth for on-tag offsets, derived-field masks and magic values.
Keep this file stable. Forge and Verify must remain synchronized.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# NTAG215 geometry: 135 pages of 4 bytes
TAG_SIZE = 540
PAGE_SIZE = 4
PAGE_COUNT = TAG_SIZE // PAGE_SIZE

# UID construction
UID_SIZE = 7
UID_PREFIX = 0x04  # NXP manufacturer byte
CASCADE_TAG = 0x88
PACKED_UID_SIZE = 8

# Password: pwd[i] = mask[i] ^ uid7[i + 1] ^ uid7[i + 3]
PWD_MASK = (0xAA, 0x55, 0xAA, 0x55)
PACK = b"\x80\x80"

AMIIBO_ID_SIZE = 8

# Required for hardware acceptance. Copied verbatim, never derived.
MAGIC_BLOCK_A = bytes.fromhex("480fe0f110ffeea5")
MAGIC_BLOCK_B = bytes.fromhex("01000fbf000000045f0000004edbf12880800000")

# Master key file: [data key (80) | tag key (80)]
# Each key: [hmac key (16) | type string (14) | rfu (1) | magic size (1) | magic (16) | xor pad (32)]
MASTER_KEY_SIZE = 80
KEY_FILE_SIZE = 2 * MASTER_KEY_SIZE
MAGIC_SIZE_OFFSET = 30
MAX_MAGIC_SIZE = 16

# Text capture format
NFC_DEVICE_MARKER = "Flipper NFC device"
NFC_SUFFIX = ".nfc"


class Domain(str, Enum):
    PACKED = "packed"
    LOGICAL = "logical"


@dataclass(frozen=True)
class Field:
    name: str
    domain: Domain
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def slice(self) -> slice:
        return slice(self.offset, self.end)


PACKED_UID = Field("packed_uid", Domain.PACKED, 0, PACKED_UID_SIZE)
POSITION8 = Field("position8", Domain.PACKED, 8, 1)
PACKED_MAGIC_A = Field("packed_magic_a", Domain.PACKED, 9, len(MAGIC_BLOCK_A))
PACKED_AMIIBO_ID = Field("packed_amiibo_id", Domain.PACKED, 84, AMIIBO_ID_SIZE)
PWD = Field("pwd", Domain.PACKED, 532, 4)
PACK_FIELD = Field("pack", Domain.PACKED, 536, len(PACK))

LOGICAL_MAGIC_A = Field("logical_magic_a", Domain.LOGICAL, 9, len(MAGIC_BLOCK_A))
LOGICAL_UID = Field("logical_uid", Domain.LOGICAL, 468, PACKED_UID_SIZE)
LOGICAL_AMIIBO_ID = Field("logical_amiibo_id", Domain.LOGICAL, 476, AMIIBO_ID_SIZE)
LOGICAL_MAGIC_B = Field("logical_magic_b", Domain.LOGICAL, 520, len(MAGIC_BLOCK_B))

FIELDS = {
    f.name: f
    for f in (
        PACKED_UID,
        POSITION8,
        PACKED_MAGIC_A,
        PACKED_AMIIBO_ID,
        PWD,
        PACK_FIELD,
        LOGICAL_MAGIC_A,
        LOGICAL_UID,
        LOGICAL_AMIIBO_ID,
        LOGICAL_MAGIC_B,
    )
}
