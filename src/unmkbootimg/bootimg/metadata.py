"""
Decoding of packed header metadata.

Two header fields need interpretation before they are useful to a human
or to mkbootimg:

- os_version packs the Android version and the security patch level
  into a single 32-bit word
- id is a 32-byte identifier, normally a SHA-1 digest of the payloads
"""

from dataclasses import dataclass

from .header import BOOT_ID_SIZE

# Size of a SHA-1 digest. The rest of the id field is zero-filled when
# the image was built with SHA-1.
SHA1_DIGEST_SIZE = 20


@dataclass(frozen=True)
class OsVersionInfo:
    """
    Decoded os_version field.

    Raw bit layout (most significant first):

        aaaaaaa bbbbbbb ccccccc yyyyyyy mmmm
        major   minor   patch   year    month

    The year is stored as an offset from 2000. The day is not encoded
    at all and is always reported as 1.

    Attributes:
        major: Android major version (0-127)
        minor: Android minor version (0-127)
        patch: Android patch version (0-127)
        year: Patch level year, offset from 2000 (0-127)
        month: Patch level month (0-15)
        day: Always 1
    """

    major: int
    minor: int
    patch: int
    year: int
    month: int
    day: int = 1

    @property
    def version(self) -> str:
        """Version string as passed to mkbootimg --os_version."""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def patch_level(self) -> str:
        """Patch level as passed to mkbootimg --os_patch_level."""
        return f"{2000 + self.year:04d}-{self.month:02d}-{self.day:02d}"


def decode_os_version(raw: int) -> OsVersionInfo:
    """
    Split the packed os_version word into its fields.

    Args:
        raw: The 32-bit os_version value from the header

    Returns:
        Decoded version and patch level
    """
    raw_version = raw >> 11
    raw_patch_level = raw & 0x7FF

    return OsVersionInfo(
        major=(raw_version >> 14) & 0x7F,
        minor=(raw_version >> 7) & 0x7F,
        patch=raw_version & 0x7F,
        year=(raw_patch_level >> 4) & 0x7F,
        month=raw_patch_level & 0xF,
    )


def is_sha1_id(image_id: bytes) -> bool:
    """
    Guess whether an image id holds a SHA-1 digest.

    This is a heuristic, not a format guarantee: mkbootimg zero-fills the
    bytes after a 20-byte SHA-1 digest, so an id whose last 12 bytes are
    all zero is assumed to be one.
    """
    return not any(image_id[SHA1_DIGEST_SIZE:BOOT_ID_SIZE])


def format_image_id(image_id: bytes) -> str:
    """
    Render the 32-byte image id for display.

    SHA-1 ids are shown as a plain lowercase hex digest followed by
    " sha1". Anything else is shown in full as hex bytes, four bytes per
    group, e.g. "de:ad:be:ef 00:11:22:33 ...".

    Args:
        image_id: The raw id field from the header

    Returns:
        Human-readable id

    Raises:
        ValueError: If image_id is not exactly 32 bytes long
    """
    if len(image_id) != BOOT_ID_SIZE:
        raise ValueError(
            f"Image id must be {BOOT_ID_SIZE} bytes, got {len(image_id)}"
        )

    if is_sha1_id(image_id):
        return image_id[:SHA1_DIGEST_SIZE].hex() + " sha1"

    groups = [
        ":".join(f"{b:02x}" for b in image_id[i:i + 4])
        for i in range(0, BOOT_ID_SIZE, 4)
    ]
    return " ".join(groups)
