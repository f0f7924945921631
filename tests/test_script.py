import struct

import pytest

from scenicwire.script import (
    DrawOp,
    LineCap,
    LineJoin,
    ScriptStore,
    TextAlign,
    TextBaseline,
    render_script,
)


def op(code, param=0, payload=b""):
    return struct.pack(">HH", int(code), param) + payload


def floats(*values):
    return struct.pack(f">{len(values)}f", *values)


def put_msg(script_id, body=b""):
    return struct.pack(">I", len(script_id)) + script_id + body


def del_msg(script_id):
    return struct.pack(">I", len(script_id)) + script_id


def store_with(**scripts):
    store = ScriptStore()
    for name, body in scripts.items():
        store.put(put_msg(name.encode(), body))
    return store


def test_put_and_get_round_trip():
    store = ScriptStore()
    body = op(DrawOp.FILL)
    assert store.put(put_msg(b"_root_", body)) == b"_root_"
    assert store.get(b"_root_") == body
    assert store.get("_root_") == body
    assert "_root_" in store
    assert len(store) == 1


def test_put_replaces_existing_script():
    store = ScriptStore()
    store.put(put_msg(b"a", op(DrawOp.FILL)))
    store.put(put_msg(b"a", op(DrawOp.STROKE)))
    assert len(store) == 1
    assert store.get(b"a") == op(DrawOp.STROKE)


def test_delete():
    store = store_with(a=op(DrawOp.FILL))
    assert store.delete(del_msg(b"a")) is True
    assert store.get(b"a") is None
    assert "a" not in store
    assert store.delete(del_msg(b"a")) is False


def test_put_rejects_truncated_messages():
    store = ScriptStore()
    with pytest.raises(ValueError):
        store.put(b"\x00\x00")
    with pytest.raises(ValueError):
        store.put(struct.pack(">I", 10) + b"abc")
    assert len(store) == 0


def test_reset_and_many_scripts():
    store = ScriptStore()
    ids = [f"script-{n}".encode() for n in range(200)]
    for sid in ids:
        store.put(put_msg(sid, sid))
    assert len(store) == len(ids)
    assert all(store.get(sid) == sid for sid in ids)
    for sid in ids[:150]:
        assert store.delete(del_msg(sid))
    assert len(store) == 50
    assert all(store.get(sid) == sid for sid in ids[150:])
    store.reset()
    assert len(store) == 0
    assert store.get(ids[-1]) is None


def test_rect_with_fill_flag():
    store = store_with(_root_=op(DrawOp.DRAW_RECT, 1, floats(10.0, 20.0)))
    assert render_script(store, "_root_") == [
        (DrawOp.DRAW_RECT, (10.0, 20.0, True, False))
    ]


def test_line_ignores_fill_flag():
    store = store_with(_root_=op(DrawOp.DRAW_LINE, 3, floats(0.0, 1.0, 2.0, 3.0)))
    assert render_script(store, "_root_") == [
        (DrawOp.DRAW_LINE, (0.0, 1.0, 2.0, 3.0, False, True))
    ]


def test_colors_and_gradients():
    body = op(DrawOp.FILL_COLOR, 0, bytes([1, 2, 3, 4])) + op(
        DrawOp.STROKE_LINEAR,
        0,
        floats(0.0, 0.0, 5.0, 5.0) + bytes([9, 8, 7, 6, 5, 4, 3, 2]),
    )
    calls = render_script(store_with(_root_=body), "_root_")
    assert calls == [
        (DrawOp.FILL_COLOR, ((1, 2, 3, 4),)),
        (DrawOp.STROKE_LINEAR, (0.0, 0.0, 5.0, 5.0, (9, 8, 7, 6), (5, 4, 3, 2))),
    ]


def test_text_is_padded_to_four_bytes():
    body = op(DrawOp.DRAW_TEXT, 3, b"abc\x00") + op(DrawOp.FILL)
    calls = render_script(store_with(_root_=body), "_root_")
    assert calls == [(DrawOp.DRAW_TEXT, ("abc",)), (DrawOp.FILL, ())]


def test_nested_script_is_expanded_inline():
    child = op(DrawOp.DRAW_CIRCLE, 2, floats(4.0))
    root = op(DrawOp.BEGIN_PATH) + op(DrawOp.RENDER_SCRIPT, 5, b"child\x00\x00\x00")
    root += op(DrawOp.FILL)
    calls = render_script(store_with(_root_=root, child=child), "_root_")
    assert calls == [
        (DrawOp.BEGIN_PATH, ()),
        (DrawOp.DRAW_CIRCLE, (4.0, False, True)),
        (DrawOp.FILL, ()),
    ]


def test_missing_script_renders_nothing():
    assert render_script(ScriptStore(), "_root_") == []


def test_push_pop_balance():
    body = op(DrawOp.POP_STATE) + op(DrawOp.PUSH_STATE) + op(DrawOp.PUSH_STATE)
    body += op(DrawOp.POP_STATE)
    calls = render_script(store_with(_root_=body), "_root_")
    ops = [c[0] for c in calls]
    assert ops == [
        DrawOp.PUSH_STATE,
        DrawOp.PUSH_STATE,
        DrawOp.POP_STATE,
        DrawOp.POP_STATE,
    ]
    assert ops.count(DrawOp.PUSH_STATE) == ops.count(DrawOp.POP_STATE)


def test_pop_push_without_prior_push():
    calls = render_script(store_with(_root_=op(DrawOp.POP_PUSH_STATE)), "_root_")
    assert calls == [(DrawOp.PUSH_STATE, ()), (DrawOp.POP_STATE, ())]


def test_param_scaled_values():
    body = op(DrawOp.STROKE_WIDTH, 8) + op(DrawOp.FONT_SIZE, 48) + op(
        DrawOp.MITER_LIMIT, 10
    )
    calls = render_script(store_with(_root_=body), "_root_")
    assert calls == [
        (DrawOp.STROKE_WIDTH, (2.0,)),
        (DrawOp.FONT_SIZE, (12.0,)),
        (DrawOp.MITER_LIMIT, (10.0,)),
    ]


def test_enum_params_and_unknown_values():
    body = (
        op(DrawOp.LINE_CAP, 1)
        + op(DrawOp.LINE_JOIN, 2)
        + op(DrawOp.TEXT_ALIGN, 7)
        + op(DrawOp.TEXT_ALIGN, 1)
        + op(DrawOp.TEXT_BASE, 2)
    )
    calls = render_script(store_with(_root_=body), "_root_")
    assert calls == [
        (DrawOp.LINE_CAP, (LineCap.ROUND,)),
        (DrawOp.LINE_JOIN, (LineJoin.MITER,)),
        (DrawOp.TEXT_ALIGN, (TextAlign.CENTER,)),
        (DrawOp.TEXT_BASE, (TextBaseline.ALPHABETIC,)),
    ]


def test_unknown_op_is_skipped():
    body = struct.pack(">HH", 0x7F, 0) + op(DrawOp.STROKE)
    assert render_script(store_with(_root_=body), "_root_") == [(DrawOp.STROKE, ())]


def test_sprites():
    entry = floats(0.0, 0.0, 8.0, 8.0, 1.0, 2.0, 16.0, 16.0)
    body = op(DrawOp.DRAW_SPRITES, 3, struct.pack(">I", 1) + b"img\x00" + entry)
    calls = render_script(store_with(_root_=body), "_root_")
    assert calls == [
        (DrawOp.DRAW_SPRITES, (b"img", ((0.0, 0.0, 8.0, 8.0, 1.0, 2.0, 16.0, 16.0),)))
    ]


def test_image_and_font_ids():
    body = op(DrawOp.FILL_IMAGE, 2, b"im\x00\x00") + op(DrawOp.FONT, 4, b"mono")
    calls = render_script(store_with(_root_=body), "_root_")
    assert calls == [(DrawOp.FILL_IMAGE, (b"im",)), (DrawOp.FONT, (b"mono",))]


def test_truncated_script_raises():
    store = store_with(_root_=op(DrawOp.DRAW_RECT, 1, floats(1.0)))
    with pytest.raises(ValueError):
        render_script(store, "_root_")


def test_self_reference_raises():
    store = store_with(loop=op(DrawOp.RENDER_SCRIPT, 4, b"loop"))
    with pytest.raises(ValueError):
        render_script(store, "loop")