"""Linear hashing table with progressive resizing.

The table starts with 64 buckets. It doubles when the load factor exceeds
0.5 and halves when it drops below 0.125. Resizing is spread over the
insert and remove operations, a few buckets at a time, so no single call
pays for a full rehash. Searches never resize.

Each bucket keeps its entries in insertion order, so entries with equal
hashes are found in the order they were added.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterator

INITIAL_BIT = 6
_U32_MAX = 0xFFFFFFFF
_POINTER_SIZE = 8
_NODE_SIZE = 32


class _State(Enum):
    STABLE = 0
    GROW = 1
    SHRINK = 2


def _check_hash(key_hash: int) -> int:
    key_hash = int(key_hash)
    if not 0 <= key_hash <= _U32_MAX:
        raise ValueError(f"hash out of 32-bit unsigned range: {key_hash}")
    return key_hash


class LinearHashTable:
    """A multimap from 32-bit hashes to values, resized incrementally."""

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        """Drop every entry and return to the initial size."""
        self._bucket_bit = INITIAL_BIT
        self._bucket_max = 1 << INITIAL_BIT
        self._bucket_mask = self._bucket_max - 1
        self._buckets: list[list[tuple[int, Any]]] = [
            [] for _ in range(self._bucket_max)
        ]
        self._count = 0
        self._set_stable()

    def _set_stable(self) -> None:
        self._state = _State.STABLE
        self._low_max = self._bucket_max
        self._low_mask = self._bucket_mask
        self._split = 0

    def _position(self, key_hash: int) -> int:
        pos = key_hash & self._low_mask
        if pos < self._split:
            pos = key_hash & self._bucket_mask
        return pos

    def _grow_step(self) -> None:
        if self._state is not _State.GROW and self._count > self._bucket_max // 2:
            if self._state is _State.STABLE:
                self._low_max = self._bucket_max
                self._low_mask = self._bucket_mask
                self._buckets.extend([] for _ in range(self._low_max))
                self._bucket_bit += 1
                self._bucket_max = 1 << self._bucket_bit
                self._bucket_mask = self._bucket_max - 1
                self._split = 0
            self._state = _State.GROW

        if self._state is not _State.GROW:
            return

        split_target = 2 * self._count
        while self._split + self._low_max < split_target:
            low = self._split
            high = self._split + self._low_max
            entries = self._buckets[low]
            self._buckets[low] = []
            self._buckets[high] = []
            for entry in entries:
                target = high if entry[0] & self._low_max else low
                self._buckets[target].append(entry)
            self._split += 1
            if self._split == self._low_max:
                self._set_stable()
                break

    def _shrink_step(self) -> None:
        if self._state is not _State.SHRINK and self._count < self._bucket_max // 8:
            if self._bucket_bit > INITIAL_BIT:
                if self._state is _State.STABLE:
                    self._low_max = self._bucket_max // 2
                    self._low_mask = self._bucket_mask // 2
                    self._split = self._low_max
                self._state = _State.SHRINK

        if self._state is not _State.SHRINK:
            return

        split_target = 8 * self._count
        while self._split + self._low_max > split_target:
            self._split -= 1
            low = self._split
            high = self._split + self._low_max
            self._buckets[low].extend(self._buckets[high])
            self._buckets[high] = []
            if self._split == 0:
                self._bucket_bit -= 1
                self._bucket_max = 1 << self._bucket_bit
                self._bucket_mask = self._bucket_max - 1
                del self._buckets[self._bucket_max:]
                self._set_stable()
                break

    def insert(self, key_hash: int, value: Any) -> None:
        """Add ``value`` under ``key_hash``; equal hashes are kept in order."""
        key_hash = _check_hash(key_hash)
        self._buckets[self._position(key_hash)].append((key_hash, value))
        self._count += 1
        self._grow_step()

    def search(self, match: Callable[[Any], bool], key_hash: int) -> Any:
        """Return the first value under ``key_hash`` accepted by ``match``, or None."""
        key_hash = _check_hash(key_hash)
        for entry_hash, value in self._buckets[self._position(key_hash)]:
            if entry_hash == key_hash and match(value):
                return value
        return None

    def _remove_at(self, bucket: list[tuple[int, Any]], index: int) -> Any:
        _, value = bucket.pop(index)
        self._count -= 1
        self._shrink_step()
        return value

    def remove(self, match: Callable[[Any], bool], key_hash: int) -> Any:
        """Remove and return the first value under ``key_hash`` accepted by ``match``.

        Returns None when nothing matches.
        """
        key_hash = _check_hash(key_hash)
        bucket = self._buckets[self._position(key_hash)]
        for index, (entry_hash, value) in enumerate(bucket):
            if entry_hash == key_hash and match(value):
                return self._remove_at(bucket, index)
        return None

    def remove_value(self, key_hash: int, value: Any) -> Any:
        """Remove the stored object ``value`` inserted under ``key_hash``.

        Raises KeyError if that object is not in the table under that hash.
        """
        key_hash = _check_hash(key_hash)
        bucket = self._buckets[self._position(key_hash)]
        for index, (entry_hash, stored) in enumerate(bucket):
            if entry_hash == key_hash and stored is value:
                return self._remove_at(bucket, index)
        raise KeyError(key_hash)

    def bucket(self, key_hash: int) -> list[Any]:
        """Values in the bucket of ``key_hash``.

        Every value stored under ``key_hash`` is included, in insertion order,
        but values with other hashes sharing the bucket may be too.
        """
        key_hash = _check_hash(key_hash)
        return [value for _, value in self._buckets[self._position(key_hash)]]

    def bucket_count(self) -> int:
        """Current number of buckets."""
        return self._bucket_max

    def memory_usage(self) -> int:
        """Estimated bytes used by the bucket array and the stored nodes."""
        return self._bucket_max * _POINTER_SIZE + self._count * _NODE_SIZE

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Any]:
        for pos in range(self._low_max + self._split):
            for _, value in list(self._buckets[pos]):
                yield value