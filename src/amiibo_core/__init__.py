"""Amiibo Core - tag layout, derived fields and format adapters."""
from .errors import (
    AmiiboError,
    FormatError,
    HmacError,
    IoError,
    KeyLoadError,
    OracleError,
    SizeError,
    ValidationError,
)
from .fields import bcc0, pack2, pack_uid, parse_custom_uid, position8, pwd4, random_uid
from .image import LogicalImage, PackedImage
from .keys import KeyHandle, load_key_material
from .oracle import AmiitoolOracle, DecodeResult, TagOracle

__all__ = [
    "AmiiboError",
    "FormatError",
    "HmacError",
    "IoError",
    "KeyLoadError",
    "OracleError",
    "SizeError",
    "ValidationError",
    "bcc0",
    "pack2",
    "pack_uid",
    "parse_custom_uid",
    "position8",
    "pwd4",
    "random_uid",
    "LogicalImage",
    "PackedImage",
    "KeyHandle",
    "load_key_material",
    "AmiitoolOracle",
    "DecodeResult",
    "TagOracle",
]
