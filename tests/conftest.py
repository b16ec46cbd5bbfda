from pathlib import Path

import pytest

from amiibo_core.fields import pack2, pack_uid, position8, pwd4
from amiibo_core.image import LogicalImage
from amiibo_core.keys import load_key_material
from tests.fakes import FakeOracle

TEMPLATE_UID = bytes.fromhex("04a1b2c3d4e5f6")
TEMPLATE_ID = bytes.fromhex("0000000000340102")


@pytest.fixture
def key_file(tmp_path) -> Path:
    raw = bytearray((i * 37 + 11) % 256 for i in range(160))
    raw[30] = 14
    raw[80 + 30] = 16
    p = tmp_path / "key_retail.bin"
    p.write_bytes(bytes(raw))
    return p


@pytest.fixture
def key(key_file):
    return load_key_material(key_file)


@pytest.fixture
def oracle():
    return FakeOracle()


def seal(packed):
    packed[8] = position8(packed)
    packed[532:536] = pwd4(packed)
    packed[536:538] = pack2()
    return packed


@pytest.fixture
def template_image(key, oracle):
    logical = LogicalImage((i * 7 + 3) % 256 for i in range(540))
    logical[468:476] = pack_uid(TEMPLATE_UID)
    logical[476:484] = TEMPLATE_ID
    return seal(oracle.encode(key, logical))


@pytest.fixture
def template(tmp_path, template_image) -> Path:
    p = tmp_path / "template.bin"
    p.write_bytes(bytes(template_image))
    return p
