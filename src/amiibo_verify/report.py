from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from .logic import BatchReport

REPORT_SCHEMA = pa.schema(
    [
        ("path", pa.string()),
        ("valid", pa.bool_()),
        ("hmac_valid", pa.bool_()),
        ("position8_valid", pa.bool_()),
        ("pwd_valid", pa.bool_()),
        ("pack_valid", pa.bool_()),
        ("uid", pa.string()),
        ("amiibo_id", pa.string()),
        ("error_codes", pa.string()),
    ]
)


def batch_frame(batch: BatchReport) -> pd.DataFrame:
    """One row per validated file, sorted by path."""
    rows = []
    for r in batch.reports:
        row = r.to_dict()
        row["error_codes"] = ",".join(e["code"] for e in row.pop("errors"))
        rows.append(row)
    df = pd.DataFrame(rows, columns=REPORT_SCHEMA.names)
    return df.sort_values("path", kind="stable").reset_index(drop=True)


def write_batch_parquet(batch: BatchReport, out: Path) -> None:
    df = batch_frame(batch)
    table = pa.Table.from_pandas(df, schema=REPORT_SCHEMA, preserve_index=False)
    Path(out).parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(table, out)
