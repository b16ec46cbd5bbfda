import stat
import sys

import pytest

from amiibo_core.errors import KeyLoadError, OracleError
from amiibo_core.image import LogicalImage, PackedImage
from amiibo_core.keys import load_key_material
from amiibo_core.oracle import AmiitoolOracle, check_encode_contract
from amiibo_core.protocol import FIELDS, LOGICAL_UID, MAGIC_BLOCK_A, PACKED_AMIIBO_ID, TAG_SIZE, Domain


def test_field_table_consistent():
    for name, f in FIELDS.items():
        assert f.name == name
        assert 0 <= f.offset < f.end <= TAG_SIZE
    assert FIELDS["pwd"].slice == slice(532, 536)
    assert FIELDS["logical_magic_b"].end == TAG_SIZE


def test_image_rejects_field_from_other_domain():
    packed = PackedImage.zeroed()
    logical = LogicalImage.zeroed()
    with pytest.raises(TypeError):
        packed.get(LOGICAL_UID)
    with pytest.raises(TypeError):
        logical.put(PACKED_AMIIBO_ID, bytes(8))
    assert logical.domain is Domain.LOGICAL


def test_image_put_checks_length():
    with pytest.raises(ValueError):
        PackedImage.zeroed().put(PACKED_AMIIBO_ID, b"\x01")


def test_load_key_material(key_file):
    key = load_key_material(key_file)
    assert len(key.data_key) == len(key.tag_key) == 80
    assert key.raw == key_file.read_bytes()
    assert "data_key" not in repr(key)


def test_load_key_material_missing(tmp_path):
    with pytest.raises(KeyLoadError):
        load_key_material(tmp_path / "none.bin")


def test_load_key_material_size(tmp_path):
    p = tmp_path / "short.bin"
    p.write_bytes(bytes(159))
    with pytest.raises(KeyLoadError, match="159"):
        load_key_material(p)


def test_load_key_material_corrupt_magic_size(tmp_path, key_file):
    raw = bytearray(key_file.read_bytes())
    raw[80 + 30] = 17
    p = tmp_path / "bad.bin"
    p.write_bytes(bytes(raw))
    with pytest.raises(KeyLoadError, match="tag key"):
        load_key_material(p)


def test_encode_contract_size():
    with pytest.raises(OracleError):
        check_encode_contract(LogicalImage.zeroed(), PackedImage(bytes(520)))


def test_encode_contract_reports_dropped_magic():
    logical = LogicalImage.zeroed()
    logical[9:17] = MAGIC_BLOCK_A
    assert check_encode_contract(logical, PackedImage.zeroed()) == ["packed_magic_a"]
    assert check_encode_contract(LogicalImage.zeroed(), PackedImage.zeroed()) == []


def test_amiitool_missing_executable(key, template_image):
    with pytest.raises(OracleError):
        AmiitoolOracle("no-such-amiitool-binary").decode(key, template_image)


def _script(tmp_path, body):
    p = tmp_path / "amiitool"
    p.write_text("#!/bin/sh\n" + body + "\n")
    p.chmod(p.stat().st_mode | stat.S_IEXEC)
    return str(p)


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_amiitool_round_trip_through_stdio(tmp_path, key, template_image):
    oracle = AmiitoolOracle(_script(tmp_path, "cat"))
    result = oracle.decode(key, template_image)
    assert result.ok
    assert isinstance(result.logical, LogicalImage)
    assert result.logical == template_image
    assert oracle.encode(key, result.logical) == template_image


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_amiitool_bad_signature(tmp_path, key, template_image):
    oracle = AmiitoolOracle(_script(tmp_path, "echo 'Tag signature was NOT valid' >&2; exit 3"))
    result = oracle.decode(key, template_image)
    assert not result.ok
    with pytest.raises(OracleError, match="NOT valid"):
        oracle.encode(key, LogicalImage.zeroed())


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_amiitool_short_decode_output(tmp_path, key, template_image):
    oracle = AmiitoolOracle(_script(tmp_path, "head -c 100"))
    with pytest.raises(OracleError, match="100"):
        oracle.decode(key, template_image)
