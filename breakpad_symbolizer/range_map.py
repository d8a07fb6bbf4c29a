"""Address-keyed indexes used by the symbol table.

``AddressMap`` answers "nearest entry at or below an address" and
``RangeMap`` adds a size to every entry so it can answer "which range
contains this address". Both keep a sorted key list and use ``bisect``
for predecessor search.
"""
from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class RangeItem(Generic[T]):
    """An indexed item together with the size of its address range."""
    item: T
    size: int


class AddressMap(Generic[T]):
    """Point index: find the entry with the greatest address <= a query."""

    def __init__(self):
        self._entries: Dict[int, T] = {}
        self._keys: List[int] = []
        self._dirty = False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[int, T]]:
        self._ensure_sorted()
        for key in self._keys:
            yield key, self._entries[key]

    def insert(self, address: int, item: T) -> None:
        """Store ``item`` at ``address``, replacing any entry already there."""
        if address not in self._entries:
            self._dirty = True
        self._entries[address] = item

    def _ensure_sorted(self) -> None:
        # Keys are sorted lazily so bulk loading stays O(n log n)
        if self._dirty:
            self._keys = sorted(self._entries)
            self._dirty = False

    def floor_key(self, address: int) -> Optional[int]:
        """Greatest stored address <= ``address``, or None."""
        self._ensure_sorted()
        pos = bisect_right(self._keys, address)
        if pos == 0:
            return None
        return self._keys[pos - 1]

    def get(self, address: int) -> Optional[T]:
        """Entry stored exactly at ``address``."""
        return self._entries.get(address)

    def retrieve(self, address: int) -> Optional[T]:
        """Return the entry at the greatest address <= ``address``, if any."""
        key = self.floor_key(address)
        if key is None:
            return None
        return self._entries[key]


class RangeMap(Generic[T]):
    """
    Interval index keyed by range start.

    A range ``[start, start + size]`` contains an address when
    ``start <= address <= start + size``. Ranges are assumed not to
    overlap and this is not checked on insert: with overlapping input only
    the nearest preceding start is ever inspected.
    """

    def __init__(self):
        self._starts: AddressMap[RangeItem[T]] = AddressMap()

    def __len__(self) -> int:
        return len(self._starts)

    def __iter__(self) -> Iterator[Tuple[int, RangeItem[T]]]:
        return iter(self._starts)

    def insert(self, address: int, size: int, item: T) -> None:
        """Store ``item`` for ``[address, address + size]``, replacing a range with the same start."""
        self._starts.insert(address, RangeItem(item=item, size=size))

    def retrieve(self, address: int) -> Optional[T]:
        """Return the item whose range contains ``address``, if any."""
        start = self._starts.floor_key(address)
        if start is None:
            return None

        entry = self._starts.get(start)
        if address <= start + entry.size:
            return entry.item
        return None
