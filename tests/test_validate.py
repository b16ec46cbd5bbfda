import pandas as pd
import pyarrow.parquet as pq

from amiibo_core.formats import encode_text
from amiibo_verify.logic import validate_many, validate_one
from amiibo_verify.report import batch_frame, write_batch_parquet


def _write(tmp_path, name, image):
    p = tmp_path / name
    p.write_bytes(bytes(image))
    return p


def test_valid_template(key, oracle, template):
    r = validate_one(key, template, oracle)
    assert r.valid and r.hmac_valid and r.position8_valid and r.pwd_valid and r.pack_valid
    assert r.uid == "04 a1 b2 9f c3 d4 e5 f6"
    assert r.amiibo_id == "0000000000340102"
    assert r.errors == []


def test_nfc_capture(tmp_path, key, oracle, template_image):
    p = tmp_path / "t.nfc"
    p.write_text(encode_text(template_image))
    assert validate_one(key, p, oracle).valid


def test_corrupt_pack_only_fails_pack(tmp_path, key, oracle, template_image):
    template_image[536:538] = b"\x80\x81"
    r = validate_one(key, _write(tmp_path, "p.bin", template_image), oracle)
    assert not r.pack_valid
    assert not r.valid
    assert r.hmac_valid and r.position8_valid and r.pwd_valid
    assert [e["code"] for e in r.errors] == ["E_PACK"]


def test_bad_signature_does_not_short_circuit(tmp_path, key, oracle, template_image):
    template_image[300] ^= 0xFF
    template_image[8] ^= 0x01
    r = validate_one(key, _write(tmp_path, "h.bin", template_image), oracle)
    assert not r.hmac_valid
    assert not r.position8_valid
    assert r.pwd_valid and r.pack_valid
    assert [e["code"] for e in r.errors] == ["E_HMAC", "E_POSITION8"]


def test_wrong_password(tmp_path, key, oracle, template_image):
    template_image[533] ^= 0x10
    r = validate_one(key, _write(tmp_path, "w.bin", template_image), oracle)
    assert r.hmac_valid and not r.pwd_valid and not r.valid


def test_idempotent(key, oracle, template):
    before = template.read_bytes()
    assert validate_one(key, template, oracle) == validate_one(key, template, oracle)
    assert template.read_bytes() == before


def test_batch_continues_past_failures(tmp_path, key, oracle, template, template_image):
    short = _write(tmp_path, "short.bin", template_image[:500])
    bad_nfc = tmp_path / "bad.nfc"
    bad_nfc.write_text("not a capture\n")
    missing = tmp_path / "missing.bin"

    batch = validate_many(key, [short, template, bad_nfc, missing, template], oracle)

    assert batch.total == 5
    assert batch.valid_count == 2
    assert batch.invalid_count == 3
    codes = [r.errors[0]["code"] if r.errors else None for r in batch.reports]
    assert codes == ["E_SIZE", None, "E_FORMAT", "E_IO", None]
    assert not batch.reports[0].hmac_valid
    # short file never reaches the oracle
    assert oracle.calls.count("decode") == 2


def test_batch_to_dict(key, oracle, template):
    d = validate_many(key, [template], oracle).to_dict()
    assert d["total"] == 1 and d["valid_count"] == 1
    assert d["reports"][0]["path"] == str(template)


def test_parquet_report(tmp_path, key, oracle, template):
    batch = validate_many(key, [template, tmp_path / "gone.bin"], oracle)
    df = batch_frame(batch)
    assert list(df["valid"]) == [False, True] or list(df["valid"]) == [True, False]
    out = tmp_path / "reports" / "batch.parquet"
    write_batch_parquet(batch, out)
    back = pq.read_table(out).to_pandas()
    pd.testing.assert_frame_equal(back, df, check_dtype=False)
    assert set(back["error_codes"]) == {"", "E_IO"}
