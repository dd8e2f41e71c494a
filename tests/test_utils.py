import zlib

import pytest

from wsforge.utils import CRC32_INITIAL, crc32, has_ext


def test_crc32_of_empty_is_initial_value():
    assert crc32(b"") == 0xFFFFFFFF


@pytest.mark.parametrize("data", [b"a", b"123456789", b"hello world" * 50, bytes(range(256))])
def test_crc32_complement_matches_standard(data):
    assert (~crc32(data)) & 0xFFFFFFFF == zlib.crc32(data)


def test_crc32_can_be_chained():
    first, second = b"chunk one ", b"and chunk two"
    assert crc32(second, crc32(first)) == crc32(first + second)


def test_crc32_keeps_32_bits():
    value = crc32(b"\xff" * 1000, CRC32_INITIAL)
    assert 0 <= value <= 0xFFFFFFFF


def test_has_ext():
    assert has_ext("/images/logo.svg", ".svg") is True
    assert has_ext("/index.html", ".svg") is False
    assert has_ext("svg", ".svg") is False
    assert has_ext("file", "") is True