"""Small helpers: a bitwise CRC-32 and a file extension check."""

from __future__ import annotations

CRC32_POLYNOMIAL = 0xEDB88320
CRC32_INITIAL = 0xFFFFFFFF


def crc32(data: bytes, crc: int = CRC32_INITIAL) -> int:
    """Update a running CRC-32 (reflected, not finalised) with data.

    The standard checksum is the bitwise complement of the result.
    """
    for byte in bytes(data):
        for _ in range(8):
            low_bit = (byte ^ crc) & 1
            crc >>= 1
            if low_bit:
                crc ^= CRC32_POLYNOMIAL
            byte >>= 1
    return crc


def has_ext(file: str, ext: str) -> bool:
    """True if the file name ends with the given extension."""
    if len(ext) > len(file):
        return False
    return file.endswith(ext)