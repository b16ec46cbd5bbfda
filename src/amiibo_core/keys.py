"""Master key loading."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import KeyLoadError
from .protocol import KEY_FILE_SIZE, MAGIC_SIZE_OFFSET, MASTER_KEY_SIZE, MAX_MAGIC_SIZE


@dataclass(frozen=True)
class KeyHandle:
    """Loaded retail key material, threaded explicitly through every operation."""

    path: Path
    data_key: bytes = field(repr=False)
    tag_key: bytes = field(repr=False)

    @property
    def raw(self) -> bytes:
        return self.data_key + self.tag_key


def load_key_material(path: Path) -> KeyHandle:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise KeyLoadError(f"Cannot read key file {path}: {e}") from e

    if len(raw) != KEY_FILE_SIZE:
        raise KeyLoadError(f"Key file {path} is {len(raw)} bytes (expected {KEY_FILE_SIZE})")

    data_key, tag_key = raw[:MASTER_KEY_SIZE], raw[MASTER_KEY_SIZE:]
    for name, k in (("data", data_key), ("tag", tag_key)):
        if k[MAGIC_SIZE_OFFSET] > MAX_MAGIC_SIZE:
            raise KeyLoadError(f"Corrupt {name} key in {path}: magic size {k[MAGIC_SIZE_OFFSET]}")

    return KeyHandle(path=path, data_key=data_key, tag_key=tag_key)
