import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from amiibo_core.errors import AmiiboError, OracleError
from amiibo_core.fields import pack2, position8, pwd4
from amiibo_core.formats import read_image, require_tag_size
from amiibo_core.keys import KeyHandle
from amiibo_core.oracle import TagOracle
from amiibo_core.protocol import PACK_FIELD, PACKED_AMIIBO_ID, PACKED_UID, POSITION8, PWD
from .const import ERRORS

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    path: str
    valid: bool = False
    hmac_valid: bool = False
    position8_valid: bool = False
    pwd_valid: bool = False
    pack_valid: bool = False
    uid: str = ""
    amiibo_id: str = ""
    errors: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class BatchReport:
    reports: list[ValidationReport]
    valid_count: int
    invalid_count: int
    total: int

    def to_dict(self) -> dict:
        return {
            "reports": [r.to_dict() for r in self.reports],
            "valid_count": self.valid_count,
            "invalid_count": self.invalid_count,
            "total": self.total,
        }


def _error(code: str, **extra) -> dict:
    return {"code": code, "message": ERRORS[code], **extra}


def validate_one(key: KeyHandle, path: Path, oracle: TagOracle) -> ValidationReport:
    """Check signature, position 8, password and PACK of one dump.

    Read, parse and size failures raise. Every later check runs regardless of
    the outcome of the others.
    """
    image = read_image(path)
    require_tag_size(image)

    report = ValidationReport(
        path=str(path),
        uid=" ".join(f"{b:02x}" for b in image.get(PACKED_UID)),
        amiibo_id=image.get(PACKED_AMIIBO_ID).hex(),
    )

    try:
        report.hmac_valid = oracle.decode(key, image).ok
    except OracleError as e:
        report.errors.append(_error("E_ORACLE", detail=str(e)))
    else:
        if not report.hmac_valid:
            report.errors.append(_error("E_HMAC"))

    report.position8_valid = image[POSITION8.offset] == position8(image)
    if not report.position8_valid:
        report.errors.append(_error("E_POSITION8", actual=f"{image[POSITION8.offset]:02x}"))

    report.pwd_valid = image.get(PWD) == pwd4(image)
    if not report.pwd_valid:
        report.errors.append(_error("E_PWD", actual=image.get(PWD).hex(), expected=pwd4(image).hex()))

    report.pack_valid = image.get(PACK_FIELD) == pack2()
    if not report.pack_valid:
        report.errors.append(_error("E_PACK", actual=image.get(PACK_FIELD).hex()))

    report.valid = report.hmac_valid and report.position8_valid and report.pwd_valid and report.pack_valid
    logger.info("%s: %s", path, "VALID" if report.valid else "INVALID")
    return report


def validate_many(key: KeyHandle, paths: list[Path], oracle: TagOracle) -> BatchReport:
    reports = []
    for p in paths:
        try:
            reports.append(validate_one(key, Path(p), oracle))
        except AmiiboError as e:
            logger.info("%s: INVALID (%s)", p, e)
            reports.append(ValidationReport(path=str(p), errors=[_error(e.code, detail=str(e))]))

    valid = sum(1 for r in reports if r.valid)
    return BatchReport(reports=reports, valid_count=valid, invalid_count=len(reports) - valid, total=len(reports))
