"""
Android boot image format.

This package knows the on-disk layout of a boot image: the header
record, where each slice lives, and how to read the packed metadata.
"""

from .header import (
    BOOT_MAGIC,
    HEADER_SIZE,
    MAX_PAGE_SIZE,
    BootImageHeader,
    parse_header,
    read_header,
)
from .geometry import (
    Slice,
    SliceDescriptor,
    round_up_to_page,
    slice_map,
    slice_offsets,
    slice_sizes,
)
from .metadata import OsVersionInfo, decode_os_version, format_image_id

__all__ = [
    # Header
    "BOOT_MAGIC",
    "HEADER_SIZE",
    "MAX_PAGE_SIZE",
    "BootImageHeader",
    "parse_header",
    "read_header",
    # Geometry
    "Slice",
    "SliceDescriptor",
    "round_up_to_page",
    "slice_map",
    "slice_offsets",
    "slice_sizes",
    # Metadata
    "OsVersionInfo",
    "decode_os_version",
    "format_image_id",
]
