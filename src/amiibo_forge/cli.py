"""Amiibo Forge - command line entry point."""
from __future__ import annotations

import logging
from pathlib import Path

import click

from amiibo_core.errors import AmiiboError
from amiibo_core.keys import load_key_material
from amiibo_core.oracle import AmiitoolOracle
from amiibo_forge.pipeline import generate_fresh, mutate_existing

EPILOG = """\b
Common Amiibo IDs:
  Poochy:  00800102035d0302
  Pikachu: 1919000000090002
  Mario:   0000000000340102
  Link:    0100000000040002
"""


@click.group(epilog=EPILOG)
@click.option("--keys", "key_file", envvar="AMIIBO_KEYS", required=True,
              type=click.Path(dir_okay=False, path_type=Path), help="Retail master key file (160 bytes)")
@click.option("--amiitool", envvar="AMIITOOL", default="amiitool", show_default=True,
              help="amiitool executable used for the keyed transform")
@click.option("-v", "--verbose", is_flag=True, help="Log every pipeline step")
@click.pass_context
def main(ctx: click.Context, key_file: Path, amiitool: str, verbose: bool) -> None:
    """Change the UID of amiibo dumps or generate fresh ones (.bin and .nfc)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s - %(name)s - %(message)s",
    )
    try:
        key = load_key_material(key_file)
    except AmiiboError as e:
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)
    ctx.obj = {"key": key, "oracle": AmiitoolOracle(amiitool)}


def _run(op, *args, **kwargs) -> None:
    try:
        report = op(*args, **kwargs)
    except AmiiboError as e:
        # Fail closed, with a single-line reason.
        click.echo(f"FATAL: {e}", err=True)
        raise SystemExit(1)
    status = "PASS" if report.self_check_passed else "WARN"
    click.echo(f"{status}: {report.output_path} uid={report.uid} pwd={report.pwd} id={report.amiibo_id}")


@main.command("change-uid")
@click.argument("template", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--uid", "custom_uid", help="Custom UID (14 hex chars); random if omitted")
@click.pass_obj
def change_uid_cmd(obj: dict, template: Path, output: Path, custom_uid: str | None) -> None:
    """Change the UID of an existing amiibo dump."""
    _run(mutate_existing, obj["key"], template, output, custom_uid, oracle=obj["oracle"])


@main.command("generate-fresh")
@click.argument("amiibo_id")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--uid", "custom_uid", help="Custom UID (14 hex chars); random if omitted")
@click.pass_obj
def generate_fresh_cmd(obj: dict, amiibo_id: str, output: Path, custom_uid: str | None) -> None:
    """Generate a fresh amiibo dump from a 16 hex char character id."""
    _run(generate_fresh, obj["key"], amiibo_id, output, custom_uid, oracle=obj["oracle"])


if __name__ == "__main__":
    main()
