"""
Test boot image header decoding and validation.
"""

import io

import pytest

from conftest import pack_header
from unmkbootimg.bootimg import HEADER_SIZE, MAX_PAGE_SIZE, parse_header, read_header
from unmkbootimg.errors import ConfigError, ErrorKind, FormatError, IoError


class TestParseHeader:
    """Test decoding of valid headers."""

    def test_header_size(self):
        assert HEADER_SIZE == 1632

    def test_fields(self):
        header = parse_header(
            pack_header(
                kernel_size=0x1234,
                kernel_addr=0x10008000,
                ramdisk_size=0x5678,
                ramdisk_addr=0x11000000,
                second_size=0x9A,
                second_addr=0x10F00000,
                tags_addr=0x10000100,
                page_size=4096,
                os_version=0x12345678,
                name=b"board",
                cmdline=b"console=ttyS0",
                extra_cmdline=b" quiet",
            )
        )

        assert header.kernel_size == 0x1234
        assert header.kernel_addr == 0x10008000
        assert header.ramdisk_size == 0x5678
        assert header.ramdisk_addr == 0x11000000
        assert header.second_size == 0x9A
        assert header.second_addr == 0x10F00000
        assert header.tags_addr == 0x10000100
        assert header.page_size == 4096
        assert header.os_version == 0x12345678
        assert header.name == "board"
        assert header.cmdline == "console=ttyS0"
        assert header.extra_cmdline == " quiet"
        assert header.full_cmdline == "console=ttyS0 quiet"

    def test_little_endian(self):
        data = bytearray(pack_header())
        # kernel_size lives at offset 8
        data[8:12] = b"\x01\x02\x00\x00"
        assert parse_header(bytes(data)).kernel_size == 0x201

    def test_text_cut_at_first_nul(self):
        header = parse_header(pack_header(name=b"abc\0junk"))
        assert header.name == "abc"

    def test_id_words(self):
        image_id = bytes(range(32))
        header = parse_header(pack_header(image_id=image_id))
        assert header.id == image_id
        assert len(header.id_words) == 8
        assert header.id_words[0] == 0x03020100

    def test_extra_trailing_data_ignored(self):
        header = parse_header(pack_header() + b"\xff" * 100)
        assert header.kernel_size == 100

    def test_second_size_zero_accepted(self):
        header = parse_header(pack_header(second_size=0))
        assert header.second_size == 0

    def test_immutable(self):
        header = parse_header(pack_header())
        with pytest.raises(AttributeError):
            header.kernel_size = 1


class TestHeaderRejection:
    """Test that invalid headers are refused."""

    def test_truncated(self):
        with pytest.raises(FormatError) as exc_info:
            parse_header(pack_header()[:HEADER_SIZE - 1])
        assert "Truncated" in str(exc_info.value)

    def test_empty(self):
        with pytest.raises(FormatError):
            parse_header(b"")

    @pytest.mark.parametrize("magic", [b"ANDROID?", b"android!", b"\0" * 8, b"VNDRBOOT"])
    def test_bad_magic(self, magic):
        with pytest.raises(FormatError) as exc_info:
            parse_header(pack_header(magic=magic))
        assert "magic" in str(exc_info.value)

    def test_zero_kernel_size(self):
        with pytest.raises(FormatError) as exc_info:
            parse_header(pack_header(kernel_size=0))
        assert "kernel_size" in str(exc_info.value)

    def test_zero_ramdisk_size(self):
        with pytest.raises(FormatError) as exc_info:
            parse_header(pack_header(ramdisk_size=0))
        assert "ramdisk_size" in str(exc_info.value)

    def test_zero_page_size(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_header(pack_header(page_size=0))
        assert exc_info.value.kind is ErrorKind.CONFIG

    def test_oversized_page_size(self):
        with pytest.raises(ConfigError):
            parse_header(pack_header(page_size=MAX_PAGE_SIZE + 1))

    def test_max_page_size_accepted(self):
        assert parse_header(pack_header(page_size=MAX_PAGE_SIZE)).page_size == MAX_PAGE_SIZE

    def test_error_names_operation(self):
        with pytest.raises(FormatError) as exc_info:
            parse_header(b"")
        assert exc_info.value.operation == "parse_header"
        assert str(exc_info.value).startswith("Error in parse_header(): ")


class BrokenFile(io.BytesIO):
    def read(self, size=-1):
        raise OSError(5, "Input/output error")


class TestReadHeader:
    """Test reading the header from a file object."""

    def test_rewinds_before_reading(self):
        source = io.BytesIO(pack_header())
        source.seek(100)
        assert read_header(source).kernel_size == 100

    def test_short_file(self):
        with pytest.raises(FormatError):
            read_header(io.BytesIO(b"ANDROID!"))

    def test_read_failure(self):
        with pytest.raises(IoError) as exc_info:
            read_header(BrokenFile(pack_header()))
        assert "Input/output error" in str(exc_info.value)
        assert exc_info.value.kind is ErrorKind.IO
