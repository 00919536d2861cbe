"""
Boot image slice geometry.

A boot image is laid out as four consecutive slices:

    +----------+----------+-----------+----------+
    |  header  |  kernel  |  ramdisk  |  second  |
    +----------+----------+-----------+----------+
    0          ^          ^           ^
               page-aligned offsets

Each slice is padded with zeros up to the next page boundary, so the
offset of a slice is the sum of the page-rounded sizes of the slices
before it. The sizes themselves are the exact byte counts from the
header.
"""

import enum
import logging
from dataclasses import dataclass

from unmkbootimg.errors import ConfigError

from .header import HEADER_SIZE, BootImageHeader

logger = logging.getLogger(__name__)


class Slice(enum.IntEnum):
    """Slices of a boot image, in on-disk order."""

    HEADER = 0
    KERNEL = 1
    RAMDISK = 2
    SECOND = 3


@dataclass(frozen=True)
class SliceDescriptor:
    """
    Location of one slice inside the image.

    Attributes:
        slice: Which slice this is
        size: Exact size in bytes (not rounded up)
        offset: Page-aligned start offset in the image
    """

    slice: Slice
    size: int
    offset: int

    @property
    def present(self) -> bool:
        """A zero-sized slice is absent from the image."""
        return self.size > 0

    @property
    def end(self) -> int:
        """Offset just past the last byte of the slice (exclusive)."""
        return self.offset + self.size

    def __str__(self) -> str:
        return f"{self.slice.name.lower()}: offset 0x{self.offset:08x}, {self.size} bytes"


def round_up_to_page(size: int, page_size: int) -> int:
    """
    Round a byte count up to the next multiple of page_size.

    Args:
        size: Byte count
        page_size: Page size in bytes, must be positive

    Returns:
        Smallest multiple of page_size that is >= size

    Raises:
        ConfigError: If page_size is not positive
    """
    if page_size <= 0:
        raise ConfigError("round_up_to_page", f"Invalid page_size {page_size}")
    return ((size + page_size - 1) // page_size) * page_size


def slice_sizes(header: BootImageHeader) -> tuple[int, int, int, int]:
    """Exact sizes of the header, kernel, ramdisk and second slices."""
    return (
        HEADER_SIZE,
        header.kernel_size,
        header.ramdisk_size,
        header.second_size,
    )


def slice_offsets(header: BootImageHeader) -> tuple[int, int, int, int]:
    """
    Page-aligned start offsets of the header, kernel, ramdisk and second slices.

    The header starts at 0 and each following slice starts where the
    page-rounded previous slice ends.
    """
    sizes = slice_sizes(header)
    offsets = [0]
    for size in sizes[:-1]:
        offsets.append(offsets[-1] + round_up_to_page(size, header.page_size))
    return tuple(offsets)


def slice_map(header: BootImageHeader) -> list[SliceDescriptor]:
    """
    Describe every slice of the image.

    Args:
        header: Parsed header

    Returns:
        One SliceDescriptor per slice, in on-disk order. Absent slices
        are included with size 0.
    """
    descriptors = [
        SliceDescriptor(slice=Slice(index), size=size, offset=offset)
        for index, (size, offset) in enumerate(
            zip(slice_sizes(header), slice_offsets(header))
        )
    ]
    for descriptor in descriptors:
        logger.debug(f"Slice {descriptor}")
    return descriptors
