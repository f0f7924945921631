"""Hash functions for byte keys and integers.

``hash_u32`` and ``hash_u64`` follow the "lookup3" construction
(``hashlittle`` and ``hashlittle2``); ``strhash_u32`` is a variant for
zero-terminated strings; ``inthash_u32`` and ``inthash_u64`` are reversible
integer mixers.
"""

from __future__ import annotations

import struct

_M32 = 0xFFFFFFFF
_M64 = 0xFFFFFFFFFFFFFFFF
_SEED = 0xDEADBEEF
_WORDS = struct.Struct("<III")
_WORD = struct.Struct("<I")
_BYTE_MASKS = (0xFF, 0xFF00, 0xFF0000)


def _check(value: int, mask: int, what: str) -> int:
    value = int(value)
    if not 0 <= value <= mask:
        raise ValueError(f"{what} out of range: {value}")
    return value


def _rot(x: int, k: int) -> int:
    return ((x << k) | (x >> (32 - k))) & _M32


def _mix(a: int, b: int, c: int) -> tuple[int, int, int]:
    a = ((a - c) & _M32) ^ _rot(c, 4)
    c = (c + b) & _M32
    b = ((b - a) & _M32) ^ _rot(a, 6)
    a = (a + c) & _M32
    c = ((c - b) & _M32) ^ _rot(b, 8)
    b = (b + a) & _M32
    a = ((a - c) & _M32) ^ _rot(c, 16)
    c = (c + b) & _M32
    b = ((b - a) & _M32) ^ _rot(a, 19)
    a = (a + c) & _M32
    c = ((c - b) & _M32) ^ _rot(b, 4)
    b = (b + a) & _M32
    return a, b, c


def _final(a: int, b: int, c: int) -> tuple[int, int, int]:
    c ^= b
    c = (c - _rot(b, 14)) & _M32
    a ^= c
    a = (a - _rot(c, 11)) & _M32
    b ^= a
    b = (b - _rot(a, 25)) & _M32
    c ^= b
    c = (c - _rot(b, 16)) & _M32
    a ^= c
    a = (a - _rot(c, 4)) & _M32
    b ^= a
    b = (b - _rot(a, 14)) & _M32
    c ^= b
    c = (c - _rot(b, 24)) & _M32
    return a, b, c


def _lookup3(key: bytes, a: int, b: int, c: int) -> tuple[int, int]:
    """Run the block loop and tail of lookup3, returning ``(b, c)``."""
    if not key:
        return b, c
    offset = 0
    remaining = len(key)
    while remaining > 12:
        wa, wb, wc = _WORDS.unpack_from(key, offset)
        a = (a + wa) & _M32
        b = (b + wb) & _M32
        c = (c + wc) & _M32
        a, b, c = _mix(a, b, c)
        offset += 12
        remaining -= 12
    tail = key[offset:].ljust(12, b"\0")
    wa, wb, wc = _WORDS.unpack(tail)
    a = (a + wa) & _M32
    b = (b + wb) & _M32
    c = (c + wc) & _M32
    _, b, c = _final(a, b, c)
    return b, c


def hash_u32(init_val: int, key: bytes) -> int:
    """32-bit lookup3 hash of ``key`` seeded with ``init_val``."""
    init_val = _check(init_val, _M32, "init_val")
    data = bytes(key)
    start = (_SEED + (len(data) & _M32) + init_val) & _M32
    _, c = _lookup3(data, start, start, start)
    return c


def hash_u64(init_val: int, key: bytes) -> int:
    """64-bit lookup3 hash of ``key`` seeded with ``init_val``."""
    init_val = _check(init_val, _M64, "init_val")
    data = bytes(key)
    start = (_SEED + (len(data) & _M32) + (init_val & _M32)) & _M32
    c = (start + (init_val >> 32)) & _M32
    b, c = _lookup3(data, start, start, c)
    return c + (b << 32)


def _absorb_terminal(acc: int, word: int) -> int:
    for mask in _BYTE_MASKS:
        part = word & mask
        if not part:
            break
        acc = (acc + part) & _M32
    return acc


def _has_zero(word: int) -> bool:
    return ((word - 0x01010101) & ~word & 0x80808080 & _M32) != 0


def strhash_u32(init_val: int, key: bytes | str) -> int:
    """32-bit hash of a zero-terminated string.

    Bytes after the first NUL are ignored; a ``str`` is hashed as UTF-8.
    """
    init_val = _check(init_val, _M64, "init_val")
    if isinstance(key, str):
        key = key.encode("utf-8")
    text = bytes(key).split(b"\0", 1)[0]
    data = text + b"\0" * (12 - len(text) % 12 + 4)

    start = (_SEED + init_val) & _M32
    acc = [start, start, start]
    offset = 0
    done = False
    while not done:
        for slot in range(3):
            (word,) = _WORD.unpack_from(data, offset + 4 * slot)
            if _has_zero(word):
                acc[slot] = _absorb_terminal(acc[slot], word)
                done = True
                break
            acc[slot] = (acc[slot] + word) & _M32
        else:
            acc[0], acc[1], acc[2] = _mix(*acc)
            offset += 12
    _, _, c = _final(*acc)
    return c


def inthash_u32(key: int) -> int:
    """Reversible 32-bit integer hash."""
    key = _check(key, _M32, "key")
    key = (key - (key << 6)) & _M32
    key ^= key >> 17
    key = (key - (key << 9)) & _M32
    key ^= (key << 4) & _M32
    key = (key - (key << 3)) & _M32
    key ^= (key << 10) & _M32
    key ^= key >> 15
    return key


def inthash_u64(key: int) -> int:
    """Reversible 64-bit integer hash."""
    key = _check(key, _M64, "key")
    key = ((~key & _M64) + (key << 21)) & _M64
    key ^= key >> 24
    key = (key + (key << 3) + (key << 8)) & _M64
    key ^= key >> 14
    key = (key + (key << 2) + (key << 4)) & _M64
    key ^= key >> 28
    key = (key + (key << 31)) & _M64
    return key