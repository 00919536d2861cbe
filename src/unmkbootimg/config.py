"""
Run configuration.

Holds everything a single unpack run needs besides the image itself:
where to write, what to call the outputs, and which mkbootimg command
the rebuild script should invoke.
"""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_SCRIPT_NAME = "remkbootimg.sh"
DEFAULT_KERNEL_NAME = "kernel.img"
DEFAULT_RAMDISK_NAME = "ramdisk.img"
DEFAULT_SECOND_NAME = "secondary.img"
DEFAULT_NEW_IMAGE_NAME = "newboot.img"
DEFAULT_MKBOOTIMG_CMD = "mkbootimg"


@dataclass(frozen=True)
class OutputPaths:
    """
    Names of the files a run produces.

    All names are relative to the destination directory, which is also
    the directory the rebuild script is expected to be run from.

    Attributes:
        script: Rebuild script
        kernel: Extracted kernel
        ramdisk: Extracted ramdisk
        second: Extracted second stage (only written if present)
        new_image: Image the rebuild script produces
    """

    script: str = DEFAULT_SCRIPT_NAME
    kernel: str = DEFAULT_KERNEL_NAME
    ramdisk: str = DEFAULT_RAMDISK_NAME
    second: str = DEFAULT_SECOND_NAME
    new_image: str = DEFAULT_NEW_IMAGE_NAME


@dataclass
class UnpackConfig:
    """
    Configuration for one unpack run.

    Attributes:
        source: Boot image to disassemble
        dest_dir: Output directory (default: the source's directory)
        script_name: Filename for the rebuild script
        kernel_name: Filename for the kernel
        ramdisk_name: Filename for the ramdisk
        second_name: Filename for the second stage
        new_image_name: Filename the rebuild script writes its image to
        mkbootimg_cmd: Command the rebuild script runs
        block_size: Copy chunk size (default: the image's page size)
    """

    source: Path
    dest_dir: Path | None = None
    script_name: str = DEFAULT_SCRIPT_NAME
    kernel_name: str = DEFAULT_KERNEL_NAME
    ramdisk_name: str = DEFAULT_RAMDISK_NAME
    second_name: str = DEFAULT_SECOND_NAME
    new_image_name: str = DEFAULT_NEW_IMAGE_NAME
    mkbootimg_cmd: str = DEFAULT_MKBOOTIMG_CMD
    block_size: int | None = None

    @property
    def destination(self) -> Path:
        """Directory the outputs go to."""
        if self.dest_dir is not None:
            return Path(self.dest_dir)
        return Path(self.source).parent

    def output_paths(self) -> OutputPaths:
        """The output filenames as an OutputPaths."""
        return OutputPaths(
            script=self.script_name,
            kernel=self.kernel_name,
            ramdisk=self.ramdisk_name,
            second=self.second_name,
            new_image=self.new_image_name,
        )
