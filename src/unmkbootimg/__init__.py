"""
unmkbootimg - Android boot image disassembler.

Splits an Android boot image into its kernel, ramdisk and second-stage
payloads, and writes a shell script that rebuilds an equivalent image
with mkbootimg.
"""

__version__ = "0.1.0"
