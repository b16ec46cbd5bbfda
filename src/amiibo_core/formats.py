"""Format adapters: raw binary dumps and Flipper NFC device captures."""
from __future__ import annotations

import logging
import re
from pathlib import Path

from .errors import FormatError, IoError, SizeError
from .fields import unpack_uid
from .image import PackedImage
from .protocol import NFC_DEVICE_MARKER, NFC_SUFFIX, PAGE_SIZE, TAG_SIZE

logger = logging.getLogger(__name__)

PAGE_LINE = re.compile(
    r"Page \d+: ([0-9A-F]{2}) ([0-9A-F]{2}) ([0-9A-F]{2}) ([0-9A-F]{2})", re.IGNORECASE
)
PAGE_PREFIX = "page "

NFC_HEADER = """Filetype: Flipper NFC device
Version: 4
# Device type can be ISO14443-3A, ISO14443-3B, ISO14443-4A, ISO14443-4B, ISO15693-3, FeliCa, NTAG/Ultralight, Mifare Classic, Mifare Plus, Mifare DESFire, SLIX, ST25TB, EMV
Device type: NTAG/Ultralight
# UID is common for all formats
UID: {uid}
# ISO14443-3A specific data
ATQA: 00 44
SAK: 00
# NTAG/Ultralight specific data
Data format version: 2
NTAG/Ultralight type: NTAG215
Signature: {signature}
Mifare version: 00 04 04 02 01 00 11 03
Counter 0: 0
Tearing 0: 00
Counter 1: 0
Tearing 1: 00
Counter 2: 0
Tearing 2: 00
Pages total: {pages}
Pages read: {pages}"""


def _spaced(b: bytes) -> str:
    return " ".join(f"{x:02X}" for x in b)


def is_text_path(path: Path) -> bool:
    return Path(path).suffix.lower() == NFC_SUFFIX


def require_tag_size(image: bytes) -> None:
    if len(image) != TAG_SIZE:
        raise SizeError(len(image), TAG_SIZE)


def decode_binary(data: bytes) -> PackedImage:
    """Identity copy. Size is left to the caller."""
    return PackedImage(data)


def decode_text(content: str) -> PackedImage:
    """Parse a Flipper NFC capture.

    Page lines are concatenated in the order they appear in the file. The page
    number is matched but never used for placement.
    """
    lines = content.split("\n")
    if NFC_DEVICE_MARKER not in lines[0]:
        raise FormatError("Not a valid Flipper NFC file")

    out = bytearray()
    for n, line in enumerate(lines[1:], start=2):
        line = line.strip()
        if not line.lower().startswith(PAGE_PREFIX):
            continue
        m = PAGE_LINE.fullmatch(line)
        if m is None:
            raise FormatError(f"Malformed page line {n}: {line!r}")
        out.extend(int(g, 16) for g in m.groups())

    if len(out) != TAG_SIZE:
        raise SizeError(len(out), TAG_SIZE)
    return PackedImage(out)


def encode_text(image: bytes) -> str:
    """Render a packed image as a Flipper NFC (version 4) device file."""
    require_tag_size(image)
    pages = len(image) // PAGE_SIZE
    header = NFC_HEADER.format(
        uid=_spaced(unpack_uid(image)),
        signature=_spaced(bytes(32)),
        pages=pages,
    )
    body = [
        f"Page {n}: {_spaced(image[n * PAGE_SIZE:(n + 1) * PAGE_SIZE])}"
        for n in range(pages)
    ]
    return header + "\n" + "\n".join(body) + "\nFailed authentication attempts: 0\n"


def read_image(path: Path) -> PackedImage:
    """Read a dump, picking the adapter from the file suffix."""
    path = Path(path)
    try:
        if is_text_path(path):
            return decode_text(path.read_text(encoding="utf-8"))
        return decode_binary(path.read_bytes())
    except UnicodeDecodeError as e:
        raise FormatError(f"Not a valid Flipper NFC file: {e}") from e
    except OSError as e:
        raise IoError(f"Cannot read {path}: {e}") from e


def write_image(path: Path, image: bytes) -> None:
    path = Path(path)
    try:
        if is_text_path(path):
            path.write_text(encode_text(image), encoding="utf-8")
        else:
            path.write_bytes(bytes(image))
    except OSError as e:
        raise IoError(f"Cannot write {path}: {e}") from e
    logger.debug("wrote %d bytes to %s", len(image), path)
