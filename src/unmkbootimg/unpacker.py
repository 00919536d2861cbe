"""
Unpack pipeline.

Ties the format modules together into one run:

1. Open the source image (kept open for the whole run)
2. Read and validate the header, compute the slice map
3. Write the rebuild script, then the kernel, ramdisk and second stage,
   opening each destination just before it is written and closing it
   right after

Every error aborts the run. Files already written are left in place.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from unmkbootimg.bootimg import (
    BootImageHeader,
    OsVersionInfo,
    Slice,
    SliceDescriptor,
    decode_os_version,
    format_image_id,
    read_header,
    slice_map,
)
from unmkbootimg.config import UnpackConfig
from unmkbootimg.errors import ConfigError, IoError
from unmkbootimg.extract import copy_slice
from unmkbootimg.script import render_script, write_script

logger = logging.getLogger(__name__)


@dataclass
class ImageReport:
    """
    Summary of a boot image header, for display.

    Attributes:
        header: The parsed header
        slices: Slice map in on-disk order
        os_info: Decoded os_version
        image_id: Formatted image id
    """

    header: BootImageHeader
    slices: list[SliceDescriptor]
    os_info: OsVersionInfo
    image_id: str

    @classmethod
    def from_header(cls, header: BootImageHeader) -> "ImageReport":
        """Build the report for a parsed header."""
        return cls(
            header=header,
            slices=slice_map(header),
            os_info=decode_os_version(header.os_version),
            image_id=format_image_id(header.id),
        )

    def lines(self) -> list[str]:
        """The report as lines of text."""
        sizes = {d.slice: d.size for d in self.slices}
        return [
            f"Page size: {self.header.page_size}B",
            f"Kernel size: {sizes[Slice.KERNEL]}B",
            f"Ramdisk size: {sizes[Slice.RAMDISK]}B",
            f"Second size: {sizes[Slice.SECOND]}B",
            f"Android Version: {self.os_info.version}; "
            f"Patch Level: {self.os_info.patch_level}",
            f"Image ID: {self.image_id}",
            f"Board: {self.header.name}",
            f"Command line: {self.header.full_cmdline}",
        ]


@dataclass
class UnpackResult:
    """
    Outcome of a successful run.

    Attributes:
        report: Header summary
        destination: Directory the files were written to
        written: Paths of every file written, in write order
    """

    report: ImageReport
    destination: Path
    written: list[Path] = field(default_factory=list)


class Unpacker:
    """
    Disassembles one boot image.

    Usage:
        config = UnpackConfig(source=Path("boot.img"))
        result = Unpacker(config).run()
        for path in result.written:
            print(path)
    """

    def __init__(self, config: UnpackConfig):
        """
        Create an unpacker.

        Args:
            config: Run configuration
        """
        self._config = config
        self._paths = config.output_paths()

    def inspect(self) -> ImageReport:
        """
        Read and validate the header without writing anything.

        Returns:
            The header summary

        Raises:
            BootImageError: If the source cannot be read or is invalid
        """
        with self._open_source() as source:
            return ImageReport.from_header(read_header(source))

    def run(self) -> UnpackResult:
        """
        Extract every present slice and write the rebuild script.

        Returns:
            What was written, and where

        Raises:
            BootImageError: On the first failure; earlier outputs remain
        """
        with self._open_source() as source:
            destination = self._prepare_destination()

            logger.info("Reading header...")
            header = read_header(source)
            report = ImageReport.from_header(header)
            for line in report.lines():
                logger.info(line)

            result = UnpackResult(report=report, destination=destination)
            block_size = self._config.block_size
            if block_size is None:
                block_size = header.page_size

            names = {
                Slice.HEADER: self._paths.script,
                Slice.KERNEL: self._paths.kernel,
                Slice.RAMDISK: self._paths.ramdisk,
                Slice.SECOND: self._paths.second,
            }

            for descriptor in report.slices:
                if not descriptor.present:
                    logger.debug(f"Skipping absent {descriptor.slice.name.lower()} slice")
                    continue

                path = destination / names[descriptor.slice]
                logger.info(f'Writing "{names[descriptor.slice]}"')

                # The header slice's output is the rebuild script
                if descriptor.slice is Slice.HEADER:
                    self._write_script(path, header)
                else:
                    self._write_slice(path, source, block_size, descriptor)

                result.written.append(path)

        return result

    def _open_source(self) -> BinaryIO:
        """Open the source image for reading."""
        source = Path(self._config.source)
        try:
            return open(source, "rb")
        except OSError as e:
            raise IoError.from_os_error(
                "open_source", f'Failed to open "{source}" in "rb" mode', e
            ) from e

    def _prepare_destination(self) -> Path:
        """Create the destination directory if it does not exist yet."""
        destination = self._config.destination
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoError.from_os_error(
                "prepare_destination", f'Failed to create directory "{destination}"', e
            ) from e
        return destination

    def _open_destination(self, path: Path, mode: str, **kwargs):
        try:
            return open(path, mode, **kwargs)
        except OSError as e:
            raise IoError.from_os_error(
                "open_destination", f'Failed to open "{path}" in "{mode}" mode', e
            ) from e

    def _write_script(self, path: Path, header: BootImageHeader) -> None:
        text = render_script(header, self._paths, self._config.mkbootimg_cmd)

        # latin-1 writes header text fields back out byte-for-byte. Check
        # the user-supplied names fit before the file is created.
        try:
            text.encode("latin-1")
        except UnicodeEncodeError as e:
            raise ConfigError(
                "write_script",
                f"Cannot write {e.object[e.start:e.end]!r} to the remake script; "
                "names must be latin-1 characters",
            ) from e

        try:
            with self._open_destination(path, "w", encoding="latin-1", newline="\n") as f:
                write_script(f, text)
        except OSError as e:
            raise IoError.from_os_error(
                "write_script", f'Failed to write "{path}"', e
            ) from e

    def _write_slice(
        self,
        path: Path,
        source: BinaryIO,
        block_size: int,
        descriptor: SliceDescriptor,
    ) -> None:
        try:
            with self._open_destination(path, "wb") as f:
                copy_slice(source, f, block_size, descriptor.offset, descriptor.size)
        except OSError as e:
            # Raised when the final flush on close fails
            raise IoError.from_os_error(
                "write_slice", f'Failed to write "{path}"', e
            ) from e
