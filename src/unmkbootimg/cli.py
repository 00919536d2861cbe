"""
Command-line interface for unmkbootimg.

This module defines the command using the Typer library. It is the only
place that prints diagnostics or chooses an exit status.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from unmkbootimg import __version__
from unmkbootimg.config import (
    DEFAULT_MKBOOTIMG_CMD,
    DEFAULT_NEW_IMAGE_NAME,
    DEFAULT_SCRIPT_NAME,
    UnpackConfig,
)
from unmkbootimg.errors import BootImageError
from unmkbootimg.unpacker import Unpacker

app = typer.Typer(
    name="unmkbootimg",
    help="unmkbootimg - Android boot image disassembler",
    no_args_is_help=True,
    add_completion=False,
)

_handlers: list[logging.Handler] = []


def configure_logging(verbose: bool) -> None:
    """
    Route package log messages to the console.

    Progress messages are INFO and go to stdout, so they only show up in
    verbose mode. Warnings always go to stderr.
    """
    logger = logging.getLogger("unmkbootimg")
    for handler in _handlers:
        logger.removeHandler(handler)
    _handlers.clear()

    progress = logging.StreamHandler(sys.stdout)
    progress.addFilter(lambda record: record.levelno < logging.WARNING)
    warnings = logging.StreamHandler(sys.stderr)
    warnings.setLevel(logging.WARNING)

    for handler in (progress, warnings):
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        _handlers.append(handler)

    logger.setLevel(logging.INFO if verbose else logging.WARNING)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"unmkbootimg {__version__}")
        raise typer.Exit()


@app.command()
def main(
    source: Annotated[
        Path,
        typer.Argument(help="The source Android boot image file to extract from"),
    ],
    dest_dir: Annotated[
        Path | None,
        typer.Option(
            "--dest-dir",
            "-d",
            help="Output extracted images here instead of next to the source",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Report progress and header details"),
    ] = False,
    info: Annotated[
        bool,
        typer.Option("--info", "-i", help="Only print header details; write nothing"),
    ] = False,
    script_name: Annotated[
        str,
        typer.Option("--remake-script", "-r", help="Filename for the remake script"),
    ] = DEFAULT_SCRIPT_NAME,
    mkbootimg_cmd: Annotated[
        str,
        typer.Option("--mkbootimg", "-m", help="Command the remake script runs"),
    ] = DEFAULT_MKBOOTIMG_CMD,
    new_image_name: Annotated[
        str,
        typer.Option(
            "--new-image",
            "-n",
            help="Filename the remake script writes the rebuilt image to",
        ),
    ] = DEFAULT_NEW_IMAGE_NAME,
    block_size: Annotated[
        int | None,
        typer.Option(
            "--block-size",
            "-b",
            min=1,
            help="Copy buffer size in bytes (default: the image's page size)",
        ),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """
    Extract the kernel, ramdisk and second-stage bootloader from an
    Android boot image.

    Also creates a remake script that recombines the extracted images
    into a new boot image by running mkbootimg with the parameters from
    the original header.

    Example:
        unmkbootimg boot.img -d out -v
        cd out && sh remkbootimg.sh
    """
    configure_logging(verbose)

    config = UnpackConfig(
        source=source,
        dest_dir=dest_dir,
        script_name=script_name,
        new_image_name=new_image_name,
        mkbootimg_cmd=mkbootimg_cmd,
        block_size=block_size,
    )
    unpacker = Unpacker(config)

    try:
        if info:
            report = unpacker.inspect()
            for line in report.lines():
                typer.echo(line)
            return

        unpacker.run()

    except BootImageError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
