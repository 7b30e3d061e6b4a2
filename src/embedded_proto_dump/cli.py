"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from embedded_proto_dump.output_dumping import DumpStatus
from embedded_proto_dump.run_execution import (
    RunExecutionError,
    RunRequest,
    execute_extraction_run,
)

PROG_NAME = "embedded-proto-dump"
LOG_FORMAT = "%(message)s"


class CliError(Exception):
    """Custom CLI error."""


class _ClickEchoHandler(logging.Handler):
    """Routes log records through click so they follow the active stderr stream."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:  # pylint: disable=broad-exception-caught
            self.handleError(record)


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("embedded_proto_dump")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(handler, _ClickEchoHandler) for handler in package_logger.handlers):
        handler = _ClickEchoHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)


@click.command(name=PROG_NAME, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="embedded-proto-dump")
@click.argument("input_file", type=click.Path(path_type=str))
@click.argument("output_dir", type=click.Path(path_type=str))
@click.argument("manifest_filename", required=False)
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to a YAML/JSON configuration file",
)
@click.option(
    "--backup/--no-backup",
    default=None,
    help="Keep replaced schema text files as <file>.old (default: from configuration, off).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(
    input_file: str,
    output_dir: str,
    manifest_filename: str | None,
    config_path: str | None,
    backup: bool | None,
    verbose: bool,
) -> None:
    """Recover protobuf schemas embedded in INPUT_FILE and dump them into OUTPUT_DIR.

    When MANIFEST_FILENAME is given, the compiled file names are also written
    to OUTPUT_DIR/MANIFEST_FILENAME as a JSON array in load order.
    """
    _configure_logging(verbose)
    try:
        outcome = execute_extraction_run(
            RunRequest(
                input_path=input_file,
                output_dir=output_dir,
                manifest_filename=manifest_filename,
                config_path=config_path,
                backup=backup,
            )
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc

    click.echo(
        f"{len(outcome.load_order)} schema files written to {outcome.output_dir} "
        f"({outcome.count(DumpStatus.NEW)} new, {outcome.count(DumpStatus.CHANGED)} changed, "
        f"{outcome.count(DumpStatus.UNCHANGED)} unchanged)"
    )
    if outcome.manifest_path is not None:
        click.echo(str(outcome.manifest_path))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), prog_name=PROG_NAME, standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.MissingParameter as exc:
        if exc.ctx is not None:
            click.echo(exc.ctx.get_usage())
        click.echo(f"Error: {exc.format_message()}")
        return exc.exit_code
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
