"""
Android boot image header handling.

This module decodes the fixed-size header at the start of a boot image
and validates the fields the rest of the pipeline depends on.
"""

import struct
from dataclasses import dataclass
from typing import BinaryIO

from unmkbootimg.errors import ConfigError, FormatError, IoError

# Every boot image starts with this 8-byte literal
BOOT_MAGIC = b"ANDROID!"

BOOT_NAME_SIZE = 16
BOOT_ARGS_SIZE = 512
BOOT_EXTRA_ARGS_SIZE = 1024
BOOT_ID_SIZE = 32

# struct boot_img_hdr (version 0), all integers little-endian:
#     uint8_t  magic[8];            // offset 0
#     uint32_t kernel_size;         // offset 8
#     uint32_t kernel_addr;         // offset 12
#     uint32_t ramdisk_size;        // offset 16
#     uint32_t ramdisk_addr;        // offset 20
#     uint32_t second_size;         // offset 24
#     uint32_t second_addr;         // offset 28
#     uint32_t tags_addr;           // offset 32
#     uint32_t page_size;           // offset 36
#     uint32_t header_version;      // offset 40 ("unused" in version 0)
#     uint32_t os_version;          // offset 44
#     uint8_t  name[16];            // offset 48
#     uint8_t  cmdline[512];        // offset 64
#     uint32_t id[8];               // offset 576
#     uint8_t  extra_cmdline[1024]; // offset 608
HEADER_FORMAT = "<8s10I16s512s32s1024s"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

# Upper bound for page_size. Real images use 2048-16384.
MAX_PAGE_SIZE = 128 * 1024


def _cstr(raw: bytes) -> str:
    """Cut a NUL-padded field at the first NUL and decode it byte-for-char."""
    return raw.split(b"\0", 1)[0].decode("latin-1")


@dataclass(frozen=True)
class BootImageHeader:
    """
    Parsed Android boot image header.

    The header is read once from offset 0 of the image and is never
    modified afterwards. Every later stage (geometry, extraction, script
    generation) receives it read-only.

    Attributes:
        magic: The 8-byte magic literal (always BOOT_MAGIC once parsed)
        kernel_size: Size of the kernel payload in bytes
        kernel_addr: Physical load address of the kernel
        ramdisk_size: Size of the ramdisk payload in bytes
        ramdisk_addr: Physical load address of the ramdisk
        second_size: Size of the second-stage payload (0 if absent)
        second_addr: Physical load address of the second stage
        tags_addr: Physical address of the kernel tags
        page_size: Flash page size; every slice starts on a page boundary
        header_version: Header version word (0 for the layout handled here)
        os_version: Packed OS version and patch level
        name: Board name
        cmdline: Kernel command line
        id: 32-byte image identifier (usually a SHA-1 digest)
        extra_cmdline: Continuation of the kernel command line
    """

    magic: bytes
    kernel_size: int
    kernel_addr: int
    ramdisk_size: int
    ramdisk_addr: int
    second_size: int
    second_addr: int
    tags_addr: int
    page_size: int
    header_version: int
    os_version: int
    name: str
    cmdline: str
    id: bytes
    extra_cmdline: str

    @property
    def id_words(self) -> tuple[int, ...]:
        """The identifier as eight little-endian 32-bit words."""
        return struct.unpack("<8I", self.id)

    @property
    def full_cmdline(self) -> str:
        """cmdline followed directly by extra_cmdline."""
        return self.cmdline + self.extra_cmdline

    def __repr__(self) -> str:
        return (
            f"BootImageHeader(kernel_size={self.kernel_size}, "
            f"ramdisk_size={self.ramdisk_size}, "
            f"second_size={self.second_size}, "
            f"page_size={self.page_size})"
        )


def parse_header(data: bytes) -> BootImageHeader:
    """
    Decode and validate a boot image header.

    Args:
        data: Raw bytes from the start of the image. Only the first
              HEADER_SIZE bytes are looked at.

    Returns:
        The parsed header

    Raises:
        FormatError: If the data is truncated, the magic is wrong, or the
                     kernel or ramdisk size is zero
        ConfigError: If page_size is zero or larger than MAX_PAGE_SIZE
    """
    if len(data) < HEADER_SIZE:
        raise FormatError(
            "parse_header",
            f"Truncated header: got {len(data)} bytes, need {HEADER_SIZE}",
        )

    (
        magic,
        kernel_size,
        kernel_addr,
        ramdisk_size,
        ramdisk_addr,
        second_size,
        second_addr,
        tags_addr,
        page_size,
        header_version,
        os_version,
        name,
        cmdline,
        image_id,
        extra_cmdline,
    ) = struct.unpack(HEADER_FORMAT, data[:HEADER_SIZE])

    if magic != BOOT_MAGIC:
        raise FormatError("parse_header", "Invalid magic number at start of header")
    if kernel_size == 0:
        raise FormatError("parse_header", "Invalid kernel_size")
    if ramdisk_size == 0:
        raise FormatError("parse_header", "Invalid ramdisk_size")

    # Offsets are computed by dividing by page_size, so reject it here
    # rather than fail later in the geometry stage
    if page_size == 0:
        raise ConfigError("parse_header", "Invalid page_size 0")
    if page_size > MAX_PAGE_SIZE:
        raise ConfigError(
            "parse_header",
            f"Invalid page_size {page_size} (maximum is {MAX_PAGE_SIZE})",
        )

    return BootImageHeader(
        magic=magic,
        kernel_size=kernel_size,
        kernel_addr=kernel_addr,
        ramdisk_size=ramdisk_size,
        ramdisk_addr=ramdisk_addr,
        second_size=second_size,
        second_addr=second_addr,
        tags_addr=tags_addr,
        page_size=page_size,
        header_version=header_version,
        os_version=os_version,
        name=_cstr(name),
        cmdline=_cstr(cmdline),
        id=image_id,
        extra_cmdline=_cstr(extra_cmdline),
    )


def read_header(source: BinaryIO) -> BootImageHeader:
    """
    Read the header from the start of an open image file.

    Args:
        source: Binary file object opened for reading. It is rewound
                before the read.

    Returns:
        The parsed header

    Raises:
        IoError: If rewinding or reading the file fails
        FormatError: If the file is shorter than a header or invalid
        ConfigError: If page_size is out of range
    """
    try:
        source.seek(0)
    except OSError as e:
        raise IoError.from_os_error("read_header", "Failed to rewind to start", e) from e

    try:
        data = source.read(HEADER_SIZE)
    except OSError as e:
        raise IoError.from_os_error("read_header", "Failed to read header", e) from e

    return parse_header(data)
