"""Keyed tag transform.

The signing and encryption math lives outside this package. Operations receive
a TagOracle and only ever see its two domains through PackedImage and
LogicalImage.
"""
from __future__ import annotations

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .errors import OracleError
from .image import LogicalImage, PackedImage
from .keys import KeyHandle
from .protocol import LOGICAL_MAGIC_A, MAGIC_BLOCK_A, PACKED_MAGIC_A, TAG_SIZE

logger = logging.getLogger(__name__)


@dataclass
class DecodeResult:
    ok: bool
    logical: LogicalImage | None


class TagOracle(ABC):
    @abstractmethod
    def decode(self, key: KeyHandle, packed: PackedImage) -> DecodeResult:
        """Verify the tag signature and decrypt. `ok` is False on a bad signature."""

    @abstractmethod
    def encode(self, key: KeyHandle, logical: LogicalImage) -> PackedImage:
        """Sign and encrypt a logical image."""


class AmiitoolOracle(TagOracle):
    """Delegates to an external `amiitool` binary over stdin/stdout."""

    def __init__(self, executable: str = "amiitool"):
        self.executable = executable

    def _run(self, mode: str, key: KeyHandle, data: bytes) -> subprocess.CompletedProcess:
        exe = shutil.which(self.executable)
        if exe is None:
            raise OracleError(f"amiitool executable not found: {self.executable}")
        return subprocess.run(
            [exe, mode, "-k", str(key.path)],
            input=bytes(data),
            capture_output=True,
            check=False,
        )

    def decode(self, key: KeyHandle, packed: PackedImage) -> DecodeResult:
        r = self._run("-d", key, packed)
        if r.returncode != 0:
            logger.debug("amiitool -d exited %d: %s", r.returncode, r.stderr.decode(errors="replace").strip())
            return DecodeResult(ok=False, logical=None)
        return DecodeResult(ok=True, logical=check_decode_contract(LogicalImage(r.stdout)))

    def encode(self, key: KeyHandle, logical: LogicalImage) -> PackedImage:
        r = self._run("-e", key, logical)
        if r.returncode != 0:
            raise OracleError(f"amiitool -e failed: {r.stderr.decode(errors='replace').strip()}")
        return PackedImage(r.stdout)


def check_decode_contract(logical: LogicalImage) -> LogicalImage:
    """Post-condition on decode output: a full-size logical image."""
    if len(logical) != TAG_SIZE:
        raise OracleError(f"Oracle decoded {len(logical)} bytes (expected {TAG_SIZE})")
    return logical


def check_encode_contract(logical: LogicalImage, packed: PackedImage) -> list[str]:
    """Post-condition on encode output.

    Raises OracleError on a wrong-sized result. Returns the names of fixed
    blocks the oracle did not carry over, for the caller to restore.
    """
    if len(packed) != TAG_SIZE:
        raise OracleError(f"Oracle returned {len(packed)} bytes (expected {TAG_SIZE})")

    dropped = []
    if logical.get(LOGICAL_MAGIC_A) == MAGIC_BLOCK_A and packed.get(PACKED_MAGIC_A) != MAGIC_BLOCK_A:
        dropped.append(PACKED_MAGIC_A.name)
    return dropped
