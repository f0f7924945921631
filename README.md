# scenicwire

scenicwire keeps Scenic drawing scripts and decodes them. A script is a
stream of big-endian instructions. `render_script` walks a stored script and
returns the drawing calls it makes as plain Python values, so any drawing
backend can replay them. The package also holds the pieces the store is built
on. These are lookup3-style hash functions and a linear-hashing table that
resizes a little at a time.

The package has no runtime dependencies.

## Installation

```
pip install scenicwire
```

## Modules

### `scenicwire.script`

`ScriptStore` holds scripts keyed by their id bytes.

- `put(data)` takes a `[id_len:u32][id][script]` message and stores the script. It replaces any script with the same id and returns the id. A message too short for its id raises `ValueError`.
- `delete(data)` takes a `[id_len:u32][id]` message. It returns whether a script was removed.
- `get(script_id)` returns the script body, or `None`. The id may be `bytes` or `str`.
- `reset()` removes every script.
- `script_id in store` and `len(store)` also work.

`render_script(store, script_id)` decodes a stored script into a list of
`(DrawOp, args)` pairs:

- A `RENDER_SCRIPT` instruction expands the nested script in place.
- State pushes that a script leaves open are closed with `POP_STATE` at its end.
- A `POP_STATE` with nothing pushed is dropped.
- An unknown op code is logged and skipped.
- A missing script yields no calls.
- A script that renders itself, directly or through others, raises `ValueError`.
- Data that ends in the middle of an instruction raises `ValueError`.

The enums `DrawOp`, `LineCap`, `LineJoin`, `TextAlign` and `TextBaseline`
name the instruction codes and their parameters.

```python
import struct
from scenicwire.script import DrawOp, ScriptStore, render_script

store = ScriptStore()
body = struct.pack(">HHff", DrawOp.DRAW_RECT, 1, 100.0, 50.0)  # param 1: fill
store.put(struct.pack(">I", 6) + b"_root_" + body)

print(render_script(store, "_root_"))
# [(<DrawOp.DRAW_RECT: 4>, (100.0, 50.0, True, False))]
```

### `scenicwire.hashtable`

`LinearHashTable` is a multimap from 32-bit hashes to values.

- It starts with 64 buckets.
- It doubles when the load factor goes above 0.5 and halves when it falls below 0.125. The work is spread over inserts and removes.
- Entries with equal hashes keep their insertion order.

Its methods:

- `insert(key_hash, value)` adds a value.
- `search(match, key_hash)` returns the first value under that hash that `match` accepts, or `None`.
- `remove(match, key_hash)` removes and returns that value, or `None`.
- `remove_value(key_hash, value)` removes that exact object. It raises `KeyError` if the object is not there.
- `bucket(key_hash)` lists the values in the hash's bucket.
- `clear()` removes everything.
- `bucket_count()` and `memory_usage()` report the table's size.
- `len()` and iteration work as usual.

```python
from scenicwire.hashing import inthash_u32
from scenicwire.hashtable import LinearHashTable

table = LinearHashTable()
table.insert(inthash_u32(7), "seven")
print(table.search(lambda v: v == "seven", inthash_u32(7)))  # seven
```

### `scenicwire.hashing`

- `hash_u32(init_val, key)` and `hash_u64(init_val, key)` are the lookup3 hashes of a byte string.
- `strhash_u32(init_val, key)` hashes a zero-terminated string. It ignores bytes after the first NUL and hashes a `str` as UTF-8.
- `inthash_u32(key)` and `inthash_u64(key)` are reversible integer mixers.

An argument out of range raises `ValueError`.

### `scenicwire.bits`

These functions take 32-bit unsigned integers:

- `ilog2_u32` returns the index of the highest set bit.
- `ctz_u32` returns the index of the lowest set bit.
- `roundup_pow2_u32` returns the next power of two.
- `haszero_u32` tells whether any byte of the value is zero.

Zero, where it has no defined answer, raises `ValueError`. So does a value out of range.

## What it does not do

scenicwire does not do any of the following:

- It does not open connections or read message frames from a stream. Script and delete messages must be passed to `ScriptStore` already cut out of the stream.
- It does not draw anything on a screen. `render_script` only returns the list of calls.
- It does not load fonts or images. Their ids appear in the calls as bytes.

## Running the tests

```
pip install -e .[test]
pytest
```