"""Amiibo Forge - UID change and fresh tag generation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from warnings import warn

from amiibo_core.errors import AmiiboError, HmacError, SelfCheckWarning
from amiibo_core.fields import pack2, pack_uid, parse_custom_uid, parse_hex, position8, pwd4, random_uid
from amiibo_core.formats import read_image, require_tag_size, write_image
from amiibo_core.image import LogicalImage, PackedImage
from amiibo_core.keys import KeyHandle
from amiibo_core.oracle import AmiitoolOracle, TagOracle, check_decode_contract, check_encode_contract
from amiibo_core.protocol import (
    AMIIBO_ID_SIZE,
    FIELDS,
    LOGICAL_AMIIBO_ID,
    LOGICAL_MAGIC_A,
    LOGICAL_MAGIC_B,
    LOGICAL_UID,
    MAGIC_BLOCK_A,
    MAGIC_BLOCK_B,
    PACK_FIELD,
    PACKED_AMIIBO_ID,
    PACKED_MAGIC_A,
    PACKED_UID,
    POSITION8,
    PWD,
)
from amiibo_verify.logic import ValidationReport, validate_one

logger = logging.getLogger(__name__)

# Fixed packed blocks restored when the oracle does not carry them through encode
RESTORE_AFTER_ENCODE = {PACKED_MAGIC_A.name: MAGIC_BLOCK_A}


@dataclass
class ForgeReport:
    uid: str
    pwd: str
    amiibo_id: str
    output_path: str
    self_check: ValidationReport | None

    @property
    def self_check_passed(self) -> bool:
        return self.self_check is not None and self.self_check.valid


def _new_uid(custom_uid: str | None) -> bytes:
    return random_uid() if custom_uid is None else parse_custom_uid(custom_uid)


def _encode(oracle: TagOracle, key: KeyHandle, logical: LogicalImage) -> PackedImage:
    packed = PackedImage(oracle.encode(key, logical))
    for name in check_encode_contract(logical, packed):
        logger.debug("restoring %s after encode", name)
        packed.put(FIELDS[name], RESTORE_AFTER_ENCODE[name])
    return packed


def _seal(packed: PackedImage) -> None:
    """Recompute the UID-derived fields of a packed image."""
    packed[POSITION8.offset] = position8(packed)
    packed.put(PWD, pwd4(packed))
    packed.put(PACK_FIELD, pack2())


def _self_check(key: KeyHandle, output_path: Path, oracle: TagOracle) -> ValidationReport | None:
    # Never fatal: the output stays on disk whatever the outcome.
    try:
        report = validate_one(key, output_path, oracle)
    except AmiiboError as e:
        warn(f"Generated file {output_path} could not be validated: {e}", SelfCheckWarning)
        logger.warning("self-check of %s failed: %s", output_path, e)
        return None
    if not report.valid:
        codes = ",".join(err["code"] for err in report.errors)
        warn(f"Generated file {output_path} failed validation ({codes})", SelfCheckWarning)
        logger.warning("self-check of %s failed: %s", output_path, codes)
    return report


def _finish(key, packed, output_path, oracle) -> ForgeReport:
    write_image(output_path, packed)
    logger.info("UID: %s", packed.get(PACKED_UID).hex(" "))
    logger.info("Position 8: %02x", packed[POSITION8.offset])
    logger.info("PWD: %s", packed.get(PWD).hex(" "))
    logger.info("Output file: %s", output_path)

    return ForgeReport(
        uid=packed.get(PACKED_UID).hex(),
        pwd=packed.get(PWD).hex(),
        amiibo_id=packed.get(PACKED_AMIIBO_ID).hex(),
        output_path=str(output_path),
        self_check=_self_check(key, output_path, oracle),
    )


def mutate_existing(
    key: KeyHandle,
    template_path: Path,
    output_path: Path,
    custom_uid: str | None = None,
    oracle: TagOracle | None = None,
) -> ForgeReport:
    """Give an existing dump a new UID, keeping its game data and character id."""
    oracle = oracle or AmiitoolOracle()
    uid = _new_uid(custom_uid)

    # 1. Template
    logger.info("Loading template: %s", template_path)
    template = read_image(template_path)
    require_tag_size(template)

    # 2. Decode
    result = oracle.decode(key, template)
    if not result.ok:
        raise HmacError(f"Failed to unpack template {template_path} - invalid HMAC")
    logical = check_decode_contract(LogicalImage(result.logical))

    # 3. Character id is taken from the packed template, not the logical form
    amiibo_id = template.get(PACKED_AMIIBO_ID)
    logger.info("Original Amiibo ID: %s", amiibo_id.hex())

    # 4. New UID
    logical.put(LOGICAL_UID, pack_uid(uid))

    # 5. Encode and re-derive
    packed = _encode(oracle, key, logical)
    packed.put(PACKED_AMIIBO_ID, amiibo_id)
    _seal(packed)

    return _finish(key, packed, Path(output_path), oracle)


def generate_fresh(
    key: KeyHandle,
    amiibo_id_hex: str,
    output_path: Path,
    custom_uid: str | None = None,
    oracle: TagOracle | None = None,
) -> ForgeReport:
    """Build a new dump from a character id alone."""
    amiibo_id = parse_hex(amiibo_id_hex, AMIIBO_ID_SIZE, "Amiibo ID")
    oracle = oracle or AmiitoolOracle()
    uid = _new_uid(custom_uid)
    logger.info("Creating fresh amiibo with ID: %s", amiibo_id.hex())

    logical = LogicalImage.zeroed()
    logical.put(LOGICAL_UID, pack_uid(uid))
    logical.put(LOGICAL_MAGIC_A, MAGIC_BLOCK_A)
    logical.put(LOGICAL_MAGIC_B, MAGIC_BLOCK_B)
    logical.put(LOGICAL_AMIIBO_ID, amiibo_id)

    packed = _encode(oracle, key, logical)
    _seal(packed)

    return _finish(key, packed, Path(output_path), oracle)
