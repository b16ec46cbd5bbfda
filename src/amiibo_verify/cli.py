import json
import logging
from pathlib import Path

import click

from amiibo_core.errors import AmiiboError
from amiibo_core.keys import load_key_material
from amiibo_core.oracle import AmiitoolOracle
from .logic import validate_many
from .report import write_batch_parquet

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}


@click.group()
@click.option("--keys", "key_file", envvar="AMIIBO_KEYS", required=True,
              type=click.Path(dir_okay=False, path_type=Path))
@click.option("--amiitool", envvar="AMIITOOL", default="amiitool", show_default=True)
@click.option("-v", "--verbose", is_flag=True)
@click.pass_context
def main(ctx, key_file: Path, amiitool: str, verbose: bool):
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    try:
        key = load_key_material(key_file)
    except AmiiboError as e:
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)
    ctx.obj = {"key": key, "oracle": AmiitoolOracle(amiitool)}


@main.command("files")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--report", "report_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Also write a parquet table with one row per file")
@click.pass_obj
def files_cmd(obj, paths: tuple[Path, ...], report_path: Path | None):
    batch = validate_many(obj["key"], list(paths), obj["oracle"])
    click.echo(json.dumps(batch.to_dict(), **CANONICAL_JSON_KW))
    if report_path is not None:
        write_batch_parquet(batch, report_path)
    if batch.invalid_count:
        raise SystemExit(1)

if __name__ == "__main__":
    main()
