"""Parser for the PROXY protocol version 2 header."""

from __future__ import annotations

PROXY_SIGNATURE = b"\x0d\x0a\x0d\x0a\x00\x0d\x0a\x51\x55\x49\x54\x0a"
HEADER_SIZE = 16
ADDRESS_BLOCK_SIZE = 36


class ProxyParser:
    """Consumes a PROXY v2 header in front of an HTTP stream."""

    def __init__(self) -> None:
        self._address = bytearray(ADDRESS_BLOCK_SIZE)
        # Family 0 means no proxy address was received.
        self.family = 0

    @property
    def source_address(self) -> bytes:
        """The 4 (IPv4) or 16 (IPv6) byte source address, or b"" if none."""
        if self.family == 0:
            return b""
        if (self.family & 0xF0) >> 4 == 1:
            return bytes(self._address[:4])
        return bytes(self._address[:16])

    def parse(self, data: bytes) -> tuple[bool, int]:
        """Return (done, consumed); done is False when more data is needed or
        the header is invalid."""
        data = bytes(data)
        if len(data) < 4:
            return False, 0
        if data[:4] != b"\r\n\r\n":
            return True, 0
        if len(data) < HEADER_SIZE:
            return False, 0
        if data[:12] != PROXY_SIGNATURE:
            return False, 0
        ver_cmd = data[12]
        if (ver_cmd & 0xF0) >> 4 != 2:
            return False, 0
        length = int.from_bytes(data[14:16], "big")
        if len(data) < HEADER_SIZE + length:
            return False, 0
        if length > ADDRESS_BLOCK_SIZE:
            return False, 0
        self.family = data[13]
        self._address[:length] = data[HEADER_SIZE:HEADER_SIZE + length]
        return True, HEADER_SIZE + length