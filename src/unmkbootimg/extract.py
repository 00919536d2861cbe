"""
Slice extraction.

Copies a byte range out of the source image into a destination file,
one block at a time so memory use does not depend on the slice size.
"""

import logging
from typing import BinaryIO

from unmkbootimg.errors import ConfigError, IoError

logger = logging.getLogger(__name__)


def copy_slice(
    source: BinaryIO,
    destination: BinaryIO,
    block_size: int,
    offset: int,
    count: int,
) -> int:
    """
    Copy count bytes starting at offset from source to destination.

    A single block_size buffer is reused for every chunk; the last chunk
    may be shorter. Afterwards destination holds exactly
    source[offset:offset + count].

    Callers should not call this for absent (zero-sized) slices, so that
    no empty destination file gets created.

    Args:
        source: Seekable binary file to read from
        destination: Binary file to write to, at its current position
        block_size: Chunk size in bytes
        offset: Where the slice starts in source
        count: Number of bytes to copy

    Returns:
        Number of bytes copied (always count)

    Raises:
        ConfigError: If block_size is not positive
        IoError: On seek failure, read failure, unexpected end of input,
                 or a failed or short write
    """
    if block_size <= 0:
        raise ConfigError("copy_slice", f"Invalid block size {block_size}B")

    try:
        source.seek(offset)
    except OSError as e:
        raise IoError.from_os_error(
            "copy_slice", f"Failed to seek to offset {offset}B", e
        ) from e

    buffer = memoryview(bytearray(block_size))
    copied = 0

    while copied < count:
        quota = min(block_size, count - copied)
        chunk = buffer[:quota]

        try:
            read = source.readinto(chunk)
        except OSError as e:
            raise IoError.from_os_error(
                "copy_slice",
                f"Failed to read file. Current offset: {offset + copied}B",
                e,
            ) from e

        # readinto() returns 0 (or fewer bytes than asked) at end of file
        if not read or read < quota:
            raise IoError(
                "copy_slice",
                f"Unexpected end of input. Current offset: {offset + copied + (read or 0)}B",
            )

        try:
            written = destination.write(chunk)
        except OSError as e:
            raise IoError.from_os_error("copy_slice", "Failed to write to file", e) from e

        # Unbuffered files may accept only part of the chunk
        if written is not None and written < quota:
            raise IoError(
                "copy_slice",
                f"Short write: {written} of {quota} bytes. "
                f"Current offset: {offset + copied}B",
            )

        copied += quota

    logger.debug(f"Copied {copied} bytes from offset 0x{offset:x} in {block_size}B blocks")
    return copied
