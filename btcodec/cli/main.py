"""Command-line interface for btcodec.

Provides:
- ``decode``: bencode (argument or file) to JSON
- ``encode``: JSON to bencode
- ``config show``: print the effective configuration
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import click
from rich.console import Console

from btcodec.cli.verbosity import VerbosityManager
from btcodec.config.config import ConfigManager, init_config
from btcodec.core.bencode import decode as bdecode
from btcodec.core.bencode import decode_prefix, encode as bencode
from btcodec.core.interchange import from_interchange, to_json_with_config
from btcodec.models import MAX_DEPTH_LIMIT, DuplicateKeyPolicy, LogLevel
from btcodec.utils.exceptions import (
    BencodeDecodeError,
    BencodeError,
    ConfigurationError,
)
from btcodec.utils.logging_config import LoggingContext, get_logger, setup_logging

logger = get_logger(__name__)

stderr_console = Console(stderr=True)


def _raise_cli_error(message: str) -> None:
    """Raise a ClickException with the given message."""
    raise click.ClickException(message) from None


def _codec_error_msg(error: BencodeError) -> str:
    """Format a codec error for the terminal."""
    if isinstance(error, BencodeDecodeError):
        where = f" at offset {error.offset}" if error.offset is not None else ""
        path = error.details.get("path")
        if path:
            where = f"{where} (path {'/'.join(str(p) for p in path)})"
        return f"{error.kind.value}: {error.message}{where}"
    return error.message


def _get_config_from_context(ctx: click.Context) -> ConfigManager:
    """Return the ConfigManager stored by the ``cli`` group."""
    ctx.ensure_object(dict)
    config_manager = ctx.obj.get("config_manager")
    if config_manager is None:
        config_manager = init_config(None, configure_logging=False)
        ctx.obj["config_manager"] = config_manager
    return config_manager


def _read_input(value: str | None, file_path: Path | None) -> bytes:
    """Return the raw input bytes from either the argument or a file."""
    if (value is None) == (file_path is None):
        msg = "Provide exactly one of VALUE or --file"
        raise click.UsageError(msg)
    if file_path is not None:
        return file_path.read_bytes()
    # Recover the raw argv bytes, including ones that are not valid UTF-8
    return os.fsencode(value)


def _report_codec_error(ctx: click.Context, error: BencodeError) -> None:
    verbosity: VerbosityManager = ctx.obj.get(
        "verbosity_manager", VerbosityManager(0)
    )
    if verbosity.should_show_stack_trace():
        stderr_console.print_exception()
    _raise_cli_error(_codec_error_msg(error))


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file path",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v: verbose, -vv: debug, -vvv: trace)",
)
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.version_option(package_name="btcodec")
@click.pass_context
def cli(ctx, config, verbose, quiet):
    """Btcodec - bencode encoder/decoder for BitTorrent data."""
    ctx.ensure_object(dict)
    verbosity_manager = VerbosityManager.from_count(verbose, quiet=quiet)
    ctx.obj["verbosity_manager"] = verbosity_manager

    try:
        config_manager = init_config(config, configure_logging=False)
    except ConfigurationError as e:
        _raise_cli_error(str(e))
    ctx.obj["config_manager"] = config_manager

    # Verbosity only affects this run's console output, not the stored config
    observability = config_manager.config.observability
    level = verbosity_manager.log_level_name(observability.log_level.value)
    setup_logging(observability.model_copy(update={"log_level": LogLevel(level)}))


@cli.command()
@click.argument("value", required=False)
@click.option(
    "--file",
    "-f",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read bencoded input from a file",
)
@click.option(
    "--prefix",
    is_flag=True,
    help="Decode the first value and ignore trailing bytes",
)
@click.option("--indent", type=click.IntRange(0, 8), help="Pretty-print JSON")
@click.option(
    "--max-depth",
    type=click.IntRange(1, MAX_DEPTH_LIMIT),
    help="Maximum nesting depth",
)
@click.option(
    "--duplicate-keys",
    type=click.Choice([p.value for p in DuplicateKeyPolicy]),
    help="Duplicate dictionary key policy",
)
@click.option(
    "--int-bits",
    type=click.IntRange(8, 64),
    help="Signed integer width allowed in JSON output",
)
@click.pass_context
def decode(ctx, value, file_path, prefix, indent, max_depth, duplicate_keys, int_bits):
    """Decode a bencoded VALUE (or --file) and print it as JSON."""
    config_manager = _get_config_from_context(ctx)
    try:
        cfg = config_manager.apply_overrides(
            {
                "codec.max_depth": max_depth,
                "codec.duplicate_keys": duplicate_keys,
                "interchange.int_bits": int_bits,
                "interchange.indent": indent,
            }
        )
    except ConfigurationError as e:
        _raise_cli_error(str(e))

    data = _read_input(value, file_path)
    options: dict[str, Any] = {
        "max_depth": cfg.codec.max_depth,
        "duplicate_keys": cfg.codec.duplicate_keys,
    }

    try:
        with LoggingContext("decode", logger=logger, size=len(data)):
            if prefix:
                result, consumed = decode_prefix(data, **options)
                logger.info("Decoded %d of %d bytes", consumed, len(data))
            else:
                result = bdecode(data, **options)
            rendered = to_json_with_config(result, cfg.interchange)
    except BencodeError as e:
        _report_codec_error(ctx, e)

    click.echo(rendered)


@cli.command()
@click.argument("value", required=False)
@click.option(
    "--file",
    "-f",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read JSON input from a file",
)
@click.pass_context
def encode(ctx, value, file_path):
    """Encode a JSON VALUE (or --file) as bencode and write it to stdout."""
    ctx.ensure_object(dict)
    raw = _read_input(value, file_path)
    try:
        document = json.loads(raw)
    except ValueError as e:
        _raise_cli_error(f"Invalid JSON input: {e}")

    try:
        with LoggingContext("encode", logger=logger):
            encoded = bencode(from_interchange(document))
    except BencodeError as e:
        _report_codec_error(ctx, e)

    logger.info("Encoded %d bytes", len(encoded))
    click.echo(encoded, nl=False)


@cli.group()
def config():
    """Configuration commands."""


@config.command("show")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["toml", "json"]),
    default="toml",
    show_default=True,
)
@click.pass_context
def config_show(ctx, fmt):
    """Print the effective configuration."""
    config_manager = _get_config_from_context(ctx)
    if config_manager.config_file:
        logger.info("Using config file %s", config_manager.config_file)
    click.echo(config_manager.export(fmt))


def main():
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
