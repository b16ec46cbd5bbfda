"""Tag image buffers, one type per domain."""
from __future__ import annotations

from .protocol import TAG_SIZE, Domain, Field


class TagImage(bytearray):
    domain: Domain

    @classmethod
    def zeroed(cls):
        return cls(TAG_SIZE)

    def get(self, field: Field) -> bytes:
        return bytes(self[self._check(field)])

    def put(self, field: Field, value: bytes) -> None:
        if len(value) != field.length:
            raise ValueError(f"{field.name} takes {field.length} bytes, got {len(value)}")
        self[self._check(field)] = value

    def _check(self, field: Field) -> slice:
        if field.domain is not self.domain:
            raise TypeError(f"{field.name} is a {field.domain.value} field, not {self.domain.value}")
        return field.slice


class PackedImage(TagImage):
    """On-wire, persisted layout."""

    domain = Domain.PACKED


class LogicalImage(TagImage):
    """Plaintext layout exposed by the oracle. Never persisted."""

    domain = Domain.LOGICAL
