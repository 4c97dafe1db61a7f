"""CRC32C (Castagnoli) checksums as used by TFRecord files."""

from __future__ import annotations

_POLYNOMIAL = 0x82F63B78
_MASK32 = 0xFFFFFFFF
MASK_DELTA = 0xA282EAD8


def _build_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ _POLYNOMIAL if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _build_table()


def extend(crc: int, data: bytes | bytearray | memoryview) -> int:
    """Return the CRC32C of the concatenation of a string whose CRC is ``crc`` and ``data``."""
    if isinstance(data, str):
        raise TypeError("crc32c works on bytes, not str")
    state = (crc & _MASK32) ^ _MASK32
    for byte in bytes(data):
        state = _TABLE[(state ^ byte) & 0xFF] ^ (state >> 8)
    return state ^ _MASK32


def value(data: bytes | bytearray | memoryview) -> int:
    """Return the CRC32C of ``data``."""
    return extend(0, data)


def mask(crc: int) -> int:
    """Return the masked representation of ``crc`` (rotate right 15 bits, add a constant)."""
    crc &= _MASK32
    rotated = ((crc >> 15) | (crc << 17)) & _MASK32
    return (rotated + MASK_DELTA) & _MASK32


def unmask(masked_crc: int) -> int:
    """Return the CRC whose masked representation is ``masked_crc``."""
    rotated = (masked_crc - MASK_DELTA) & _MASK32
    return ((rotated >> 17) | (rotated << 15)) & _MASK32