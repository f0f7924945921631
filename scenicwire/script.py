"""Storage of drawing scripts and decoding of their instruction streams.

A script is a sequence of big-endian instructions, each starting with a
``[op:u16][param:u16]`` word followed by op-specific data. Identifiers and
text embedded in a script are padded to a multiple of four bytes.

``render_script`` walks a stored script and returns the drawing calls it
makes, in order, as ``(DrawOp, args)`` pairs. Nested scripts are expanded
in place, and state pushes left open by a script are closed at its end.
"""

from __future__ import annotations

import logging
import struct
from enum import IntEnum
from typing import Any

from .hashing import hash_u32
from .hashtable import LinearHashTable

logger = logging.getLogger(__name__)

_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")


class LineCap(IntEnum):
    """End caps of stroked lines."""

    BUTT = 0
    ROUND = 1
    SQUARE = 2


class LineJoin(IntEnum):
    """Joins between stroked segments."""

    BEVEL = 0
    ROUND = 1
    MITER = 2


class TextAlign(IntEnum):
    """Horizontal text alignment."""

    LEFT = 0
    CENTER = 1
    RIGHT = 2


class TextBaseline(IntEnum):
    """Vertical text alignment."""

    TOP = 0
    MIDDLE = 1
    ALPHABETIC = 2
    BOTTOM = 3


class DrawOp(IntEnum):
    """Instruction codes of a drawing script."""

    DRAW_LINE = 0x01
    DRAW_TRIANGLE = 0x02
    DRAW_QUAD = 0x03
    DRAW_RECT = 0x04
    DRAW_RRECT = 0x05
    DRAW_ARC = 0x06
    DRAW_SECTOR = 0x07
    DRAW_CIRCLE = 0x08
    DRAW_ELLIPSE = 0x09
    DRAW_TEXT = 0x0A
    DRAW_SPRITES = 0x0B
    RENDER_SCRIPT = 0x0F
    BEGIN_PATH = 0x20
    CLOSE_PATH = 0x21
    FILL = 0x22
    STROKE = 0x23
    MOVE_TO = 0x26
    LINE_TO = 0x27
    ARC_TO = 0x28
    BEZIER_TO = 0x29
    QUADRATIC_TO = 0x2A
    PUSH_STATE = 0x40
    POP_STATE = 0x41
    POP_PUSH_STATE = 0x42
    SCISSOR = 0x44
    TRANSFORM = 0x50
    SCALE = 0x51
    ROTATE = 0x52
    TRANSLATE = 0x53
    FILL_COLOR = 0x60
    FILL_LINEAR = 0x61
    FILL_RADIAL = 0x62
    FILL_IMAGE = 0x63
    FILL_STREAM = 0x64
    STROKE_WIDTH = 0x70
    STROKE_COLOR = 0x71
    STROKE_LINEAR = 0x72
    STROKE_RADIAL = 0x73
    STROKE_IMAGE = 0x74
    STROKE_STREAM = 0x75
    LINE_CAP = 0x80
    LINE_JOIN = 0x81
    MITER_LIMIT = 0x82
    FONT = 0x90
    FONT_SIZE = 0x91
    TEXT_ALIGN = 0x92
    TEXT_BASE = 0x93


_KNOWN_OPS = {op.value for op in DrawOp}

# Shapes whose floats are followed by the fill/stroke flags of the param word.
_SHAPES = {
    DrawOp.DRAW_TRIANGLE: 6,
    DrawOp.DRAW_QUAD: 8,
    DrawOp.DRAW_RECT: 2,
    DrawOp.DRAW_RRECT: 3,
    DrawOp.DRAW_ARC: 2,
    DrawOp.DRAW_SECTOR: 2,
    DrawOp.DRAW_CIRCLE: 1,
    DrawOp.DRAW_ELLIPSE: 2,
}

_FLOAT_OPS = {
    DrawOp.MOVE_TO: 2,
    DrawOp.LINE_TO: 2,
    DrawOp.ARC_TO: 5,
    DrawOp.BEZIER_TO: 6,
    DrawOp.QUADRATIC_TO: 4,
    DrawOp.SCISSOR: 2,
    DrawOp.TRANSFORM: 6,
    DrawOp.SCALE: 2,
    DrawOp.ROTATE: 1,
    DrawOp.TRANSLATE: 2,
}

_PLAIN_OPS = {DrawOp.BEGIN_PATH, DrawOp.CLOSE_PATH, DrawOp.FILL, DrawOp.STROKE}

_ID_OPS = {
    DrawOp.FILL_IMAGE,
    DrawOp.FILL_STREAM,
    DrawOp.STROKE_IMAGE,
    DrawOp.STROKE_STREAM,
    DrawOp.FONT,
}

_COLOR_OPS = {DrawOp.FILL_COLOR, DrawOp.STROKE_COLOR}

_GRADIENT_OPS = {
    DrawOp.FILL_LINEAR,
    DrawOp.FILL_RADIAL,
    DrawOp.STROKE_LINEAR,
    DrawOp.STROKE_RADIAL,
}

_ENUM_OPS: dict[DrawOp, type[IntEnum]] = {
    DrawOp.LINE_CAP: LineCap,
    DrawOp.LINE_JOIN: LineJoin,
    DrawOp.TEXT_ALIGN: TextAlign,
    DrawOp.TEXT_BASE: TextBaseline,
}


def _as_id(script_id: bytes | str) -> bytes:
    if isinstance(script_id, str):
        return script_id.encode("utf-8")
    return bytes(script_id)


def _read_id(data: bytes) -> tuple[bytes, int]:
    """Read a length-prefixed identifier, returning it and the offset after it."""
    if len(data) < _U32.size:
        raise ValueError("message too short for an id length")
    (length,) = _U32.unpack_from(data, 0)
    end = _U32.size + length
    if end > len(data):
        raise ValueError(f"id length {length} exceeds the message")
    return data[_U32.size:end], end


class ScriptStore:
    """Scripts keyed by their identifier bytes."""

    def __init__(self) -> None:
        self._table = LinearHashTable()

    def _find(self, script_id: bytes) -> tuple[bytes, bytes] | None:
        return self._table.search(
            lambda entry: entry[0] == script_id, hash_u32(0, script_id)
        )

    def _discard(self, script_id: bytes) -> bool:
        removed = self._table.remove(
            lambda entry: entry[0] == script_id, hash_u32(0, script_id)
        )
        return removed is not None

    def put(self, data: bytes) -> bytes:
        """Store the script in a ``[id_len:u32][id][script]`` message.

        A script with the same id is replaced. Returns the id.
        """
        data = bytes(data)
        script_id, offset = _read_id(data)
        body = data[offset:]
        logger.info("put_script: id=%r (%d bytes)", script_id[:32], len(script_id))
        self._discard(script_id)
        self._table.insert(hash_u32(0, script_id), (script_id, body))
        return script_id

    def delete(self, data: bytes) -> bool:
        """Remove the script named in a ``[id_len:u32][id]`` message.

        Returns whether a script was removed.
        """
        script_id, _ = _read_id(bytes(data))
        return self._discard(script_id)

    def reset(self) -> None:
        """Remove every script."""
        self._table.clear()

    def get(self, script_id: bytes | str) -> bytes | None:
        """The body of the script with this id, or None."""
        entry = self._find(_as_id(script_id))
        return None if entry is None else entry[1]

    def __contains__(self, script_id: object) -> bool:
        if not isinstance(script_id, (bytes, bytearray, memoryview, str)):
            return False
        return self._find(_as_id(script_id)) is not None

    def __len__(self) -> int:
        return len(self._table)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self.pos = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self._data)

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self._data):
            raise ValueError(f"script truncated at offset {self.pos}")
        chunk = self._data[self.pos:end]
        self.pos = end
        return chunk

    def u16(self) -> int:
        return _U16.unpack(self.take(2))[0]

    def u32(self) -> int:
        return _U32.unpack(self.take(4))[0]

    def floats(self, count: int) -> tuple[float, ...]:
        return struct.unpack(f">{count}f", self.take(4 * count))

    def color(self) -> tuple[int, int, int, int]:
        r, g, b, a = self.take(4)
        return (r, g, b, a)

    def padded(self, size: int) -> bytes:
        chunk = self.take(size)
        self.pos += -size % 4
        return chunk


_Call = tuple[DrawOp, tuple[Any, ...]]


def render_script(store: ScriptStore, script_id: bytes | str) -> list[_Call]:
    """Decode the script ``script_id`` into the drawing calls it makes.

    A missing script yields no calls. A script that ends up rendering
    itself, or whose data ends mid-instruction, raises ValueError.
    """
    calls: list[_Call] = []
    _render(store, _as_id(script_id), calls, set())
    return calls


def _render(
    store: ScriptStore, script_id: bytes, calls: list[_Call], active: set[bytes]
) -> None:
    script = store.get(script_id)
    if script is None:
        logger.warning("render_script: script %r not found!", script_id[:32])
        return
    if script_id in active:
        raise ValueError(f"script {script_id!r} renders itself")
    active.add(script_id)
    try:
        _run(store, script, calls, active)
    finally:
        active.discard(script_id)


def _run(
    store: ScriptStore, script: bytes, calls: list[_Call], active: set[bytes]
) -> None:
    reader = _Reader(script)
    push_count = 0

    while not reader.at_end:
        code = reader.u16()
        param = reader.u16()
        if code not in _KNOWN_OPS:
            logger.warning("Unknown OP: 0x%02x", code)
            continue
        op = DrawOp(code)
        fill = bool(param & 1)
        stroke = bool(param & 2)

        if op is DrawOp.DRAW_LINE:
            calls.append((op, reader.floats(4) + (False, stroke)))
        elif op in _SHAPES:
            calls.append((op, reader.floats(_SHAPES[op]) + (fill, stroke)))
        elif op is DrawOp.DRAW_TEXT:
            text = reader.padded(param).decode("utf-8", errors="replace")
            calls.append((op, (text,)))
        elif op is DrawOp.DRAW_SPRITES:
            count = reader.u32()
            image_id = reader.padded(param)
            sprites = tuple(reader.floats(8) for _ in range(count))
            calls.append((op, (image_id, sprites)))
        elif op is DrawOp.RENDER_SCRIPT:
            _render(store, reader.padded(param), calls, active)
        elif op in _PLAIN_OPS:
            calls.append((op, ()))
        elif op in _FLOAT_OPS:
            calls.append((op, reader.floats(_FLOAT_OPS[op])))
        elif op is DrawOp.PUSH_STATE:
            push_count += 1
            calls.append((DrawOp.PUSH_STATE, ()))
        elif op is DrawOp.POP_STATE:
            if push_count > 0:
                push_count -= 1
                calls.append((DrawOp.POP_STATE, ()))
        elif op is DrawOp.POP_PUSH_STATE:
            if push_count > 0:
                push_count -= 1
                calls.append((DrawOp.POP_STATE, ()))
            push_count += 1
            calls.append((DrawOp.PUSH_STATE, ()))
        elif op in _COLOR_OPS:
            calls.append((op, (reader.color(),)))
        elif op in _GRADIENT_OPS:
            points = reader.floats(4)
            calls.append((op, points + (reader.color(), reader.color())))
        elif op in _ID_OPS:
            calls.append((op, (reader.padded(param),)))
        elif op in (DrawOp.STROKE_WIDTH, DrawOp.FONT_SIZE):
            calls.append((op, (param / 4.0,)))
        elif op is DrawOp.MITER_LIMIT:
            calls.append((op, (float(param),)))
        elif op in _ENUM_OPS:
            kind = _ENUM_OPS[op]
            if param in kind._value2member_map_:
                calls.append((op, (kind(param),)))

    while push_count > 0:
        push_count -= 1
        calls.append((DrawOp.POP_STATE, ()))