"""Bit manipulation helpers on 32-bit unsigned integers."""

from __future__ import annotations

_U32_MAX = 0xFFFFFFFF


def _check_u32(value: int) -> int:
    value = int(value)
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"value out of 32-bit unsigned range: {value}")
    return value


def ilog2_u32(value: int) -> int:
    """Index of the most significant set bit. Zero is not allowed."""
    value = _check_u32(value)
    if value == 0:
        raise ValueError("ilog2 of zero is undefined")
    return value.bit_length() - 1


def ctz_u32(value: int) -> int:
    """Index of the least significant set bit. Zero is not allowed."""
    value = _check_u32(value)
    if value == 0:
        raise ValueError("trailing zero count of zero is undefined")
    return (value & -value).bit_length() - 1


def roundup_pow2_u32(value: int) -> int:
    """Smallest power of two not less than ``value``."""
    value = _check_u32(value)
    if value == 0:
        raise ValueError("round up of zero is undefined")
    result = 1 << (value - 1).bit_length()
    if result > _U32_MAX:
        raise ValueError(f"no 32-bit power of two is at least {value}")
    return result


def haszero_u32(value: int) -> bool:
    """Whether any of the four bytes of ``value`` is zero."""
    value = _check_u32(value)
    return ((value - 0x01010101) & ~value & 0x80808080 & _U32_MAX) != 0