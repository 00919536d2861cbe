"""
Shared fixtures: synthetic boot images built with struct.
"""

import logging
import struct
from pathlib import Path

import pytest

from unmkbootimg.bootimg.header import BOOT_MAGIC, HEADER_FORMAT, HEADER_SIZE


def pack_header(
    magic: bytes = BOOT_MAGIC,
    kernel_size: int = 100,
    kernel_addr: int = 0x10008000,
    ramdisk_size: int = 3000,
    ramdisk_addr: int = 0x11000000,
    second_size: int = 0,
    second_addr: int = 0x10F00000,
    tags_addr: int = 0x10000100,
    page_size: int = 2048,
    header_version: int = 0,
    os_version: int = 0,
    name: bytes = b"",
    cmdline: bytes = b"",
    image_id: bytes = b"\0" * 32,
    extra_cmdline: bytes = b"",
) -> bytes:
    """Pack a version 0 header. Text fields are NUL-padded by struct."""
    return struct.pack(
        HEADER_FORMAT,
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
    )


def _pad(data: bytes, page_size: int) -> bytes:
    remainder = len(data) % page_size
    if remainder:
        data += b"\0" * (page_size - remainder)
    return data


def build_image(
    kernel: bytes = bytes(range(100)),
    ramdisk: bytes = bytes(i % 251 for i in range(3000)),
    second: bytes = b"",
    page_size: int = 2048,
    **header_fields,
) -> bytes:
    """
    Build a complete boot image.

    Each payload is padded with zeros to the next page boundary, so the
    result has the layout a real mkbootimg produces.
    """
    header = pack_header(
        kernel_size=len(kernel),
        ramdisk_size=len(ramdisk),
        second_size=len(second),
        page_size=page_size,
        **header_fields,
    )
    assert len(header) == HEADER_SIZE

    image = _pad(header, page_size) + _pad(kernel, page_size) + _pad(ramdisk, page_size)
    if second:
        image += _pad(second, page_size)
    return image


@pytest.fixture
def boot_image(tmp_path: Path) -> Path:
    """A boot image without a second stage, in its own directory."""
    path = tmp_path / "boot.img"
    path.write_bytes(
        build_image(
            os_version=(9 << 25) | (0 << 18) | (0 << 11) | (19 << 4) | 5,
            name=b"msm8916",
            cmdline=b"console=ttyHSL0,115200 ",
            extra_cmdline=b"androidboot.hardware=qcom",
            image_id=bytes(range(1, 21)) + b"\0" * 12,
        )
    )
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Remove handlers the CLI attaches so later tests start clean."""
    yield
    logger = logging.getLogger("unmkbootimg")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
