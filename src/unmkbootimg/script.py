"""
Rebuild script generation.

The rebuild script calls mkbootimg with the extracted files and the
parameters recorded in the original header, producing an equivalent
image. It is a plain POSIX shell script with one flag per line.
"""

import logging
import os
from typing import TextIO

from unmkbootimg.bootimg.header import BootImageHeader
from unmkbootimg.bootimg.metadata import decode_os_version
from unmkbootimg.config import OutputPaths

logger = logging.getLogger(__name__)

# rwxr-x---
SCRIPT_MODE = 0o750


def _hex(value: int) -> str:
    """Format like C's %#x: "0" for zero, "0x..." otherwise."""
    return f"{value:#x}" if value else "0"


def render_script(
    header: BootImageHeader,
    paths: OutputPaths,
    mkbootimg_cmd: str = "mkbootimg",
) -> str:
    """
    Build the text of the rebuild script.

    The kernel command line is written as cmdline followed by
    extra_cmdline inside double quotes. Quote characters inside the
    command line are not escaped, so a command line containing '"' or
    '$' produces a script that needs hand editing.

    Args:
        header: Parsed header of the original image
        paths: Names of the extracted files and of the new image
        mkbootimg_cmd: Command to invoke

    Returns:
        Complete script text, ending in a newline
    """
    os_info = decode_os_version(header.os_version)

    flags = [
        f'--kernel "{paths.kernel}"',
        f'--ramdisk "{paths.ramdisk}"',
    ]
    if header.second_size:
        flags.append(f'--second "{paths.second}"')
    flags += [
        f'--cmdline "{header.full_cmdline}"',
        f"--base {_hex(0)}",
        f"--kernel_offset {_hex(header.kernel_addr)}",
        f"--ramdisk_offset {_hex(header.ramdisk_addr)}",
        f"--second_offset {_hex(header.second_addr)}",
        f'--os_version "{os_info.version}"',
        f'--os_patch_level "{os_info.patch_level}"',
        f"--tags_offset {_hex(header.tags_addr)}",
        f'--board "{header.name}"',
        f"--pagesize {_hex(header.page_size)}",
        f'--output "{paths.new_image}"',
    ]

    lines = ["#!/bin/sh", f"{mkbootimg_cmd} \\"]
    lines += [f" {flag} \\" for flag in flags[:-1]]
    lines.append(f" {flags[-1]}")
    return "\n".join(lines) + "\n"


def write_script(destination: TextIO, text: str) -> None:
    """
    Write the script and try to make it executable.

    Failing to change the mode is only a warning: the script can still
    be run with "sh remkbootimg.sh".

    Args:
        destination: Text file opened for writing
        text: Script contents from render_script()
    """
    destination.write(text)
    destination.flush()

    try:
        os.fchmod(destination.fileno(), SCRIPT_MODE)
    except (OSError, AttributeError, ValueError) as e:
        # AttributeError: os.fchmod is missing on Windows
        # ValueError/UnsupportedOperation: in-memory streams have no fileno()
        logger.warning(f"Warning in write_script(): Failed to change file mode to 0750. {e}")
