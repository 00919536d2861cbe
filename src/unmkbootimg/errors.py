"""
Error taxonomy for boot image disassembly.

Every failure is fatal. Library code raises one of the exceptions below
and the command-line runner reports it once and exits with a nonzero
status. Nothing in the package prints or exits on its own.

There are three kinds of failure:
- FORMAT: the input is not a usable boot image (bad magic, truncated
  header, missing kernel or ramdisk)
- IO: an operating system call failed (open, seek, read, write, mkdir)
- CONFIG: a parameter is out of range (zero or oversized page size,
  non-positive block size)
"""

import enum


class ErrorKind(enum.Enum):
    """Category of a BootImageError."""

    FORMAT = "format"
    IO = "io"
    CONFIG = "config"


class BootImageError(Exception):
    """
    Base exception for all unmkbootimg failures.

    Attributes:
        kind: Which category of failure this is
        operation: Name of the operation that failed (e.g. "copy_slice")
        message: Human-readable description
        strerror: Underlying system error text, if any
    """

    kind: ErrorKind = ErrorKind.FORMAT

    def __init__(self, operation: str, message: str, strerror: str | None = None):
        self.operation = operation
        self.message = message
        self.strerror = strerror
        super().__init__(str(self))

    @classmethod
    def from_os_error(cls, operation: str, message: str, error: OSError) -> "BootImageError":
        """Build an error that carries the text of an OSError."""
        return cls(operation, message, error.strerror or str(error))

    def __str__(self) -> str:
        text = f"Error in {self.operation}(): {self.message}"
        if self.strerror:
            text += f". {self.strerror}"
        return text


class FormatError(BootImageError):
    """The source is not a valid boot image."""

    kind = ErrorKind.FORMAT


class IoError(BootImageError):
    """A seek, read, write, open or directory operation failed."""

    kind = ErrorKind.IO


class ConfigError(BootImageError):
    """A size parameter (page size, block size) is out of range."""

    kind = ErrorKind.CONFIG
