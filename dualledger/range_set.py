"""
range_set.py - Per-holder index of owned unit ids

A RangeSet stores the ids a holder owns as a list of disjoint inclusive
Range blocks instead of an enumerated list. Minting a block of n units adds
one entry, not n.

Lookups are linear in the number of ranges. Removal swaps the last range
into the vacated slot, so stored order is mutation order, not id order.
Adjacent ranges are never merged.
"""

from __future__ import annotations
from typing import Iterator, List, Optional

from .core import Range


class RangeSet:
    """
    Mutable list of disjoint Range blocks.

    Example:
        rs = RangeSet([Range(1, 10)])
        rs.remove_matching(4)      # -> Range(5, 10), rs = [1..3, 5..10]
        rs.unit_count()            # 9
    """

    __slots__ = ("_ranges",)

    def __init__(self, ranges: Optional[List[Range]] = None):
        self._ranges: List[Range] = list(ranges) if ranges else []

    def __len__(self) -> int:
        return len(self._ranges)

    def __iter__(self) -> Iterator[Range]:
        return iter(list(self._ranges))

    def __getitem__(self, index: int) -> Range:
        return self._ranges[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, RangeSet):
            return NotImplemented
        return self._ranges == other._ranges

    def __repr__(self) -> str:
        return f"RangeSet({self._ranges!r})"

    def ranges(self) -> List[Range]:
        """Copy of the stored ranges in stored order."""
        return list(self._ranges)

    def copy(self) -> RangeSet:
        return RangeSet(self._ranges)

    def unit_count(self) -> int:
        """Total number of ids covered."""
        return sum(r.size for r in self._ranges)

    def iter_ids(self) -> Iterator[int]:
        """Yield every covered id, range by range in stored order."""
        for r in list(self._ranges):
            yield from range(r.start, r.end + 1)

    def find(self, unit_id: int) -> int:
        """Index of the range containing unit_id, or -1."""
        for i, r in enumerate(self._ranges):
            if r.start <= unit_id <= r.end:
                return i
        return -1

    def contains(self, unit_id: int) -> bool:
        return self.find(unit_id) >= 0

    def insert(self, r: Range) -> None:
        """Append a range. The caller guarantees it is disjoint from the rest."""
        self._ranges.append(r)

    def replace_at(self, index: int, r: Range) -> None:
        self._ranges[index] = r

    def pop_at(self, index: int) -> Range:
        """Remove the range at index by swapping the last range into its slot."""
        removed = self._ranges[index]
        last = self._ranges.pop()
        if index < len(self._ranges):
            self._ranges[index] = last
        return removed

    def remove_matching(self, unit_id: int) -> Optional[Range]:
        """
        Take unit_id out of the set.

        - single-id range: swap-popped
        - id on a boundary: the range shrinks by one
        - interior id: the range is cut to [start, id-1] and the suffix
          [id+1, end] is appended to this set

        Returns:
            The appended suffix range for an interior split, else None.
            Unknown ids are ignored and also return None; callers that
            require the id to be present check contains() first.
        """
        index = self.find(unit_id)
        if index < 0:
            return None
        r = self._ranges[index]
        if r.start == r.end:
            self.pop_at(index)
            return None
        if unit_id == r.start:
            self._ranges[index] = Range(r.start + 1, r.end)
            return None
        if unit_id == r.end:
            self._ranges[index] = Range(r.start, r.end - 1)
            return None
        self._ranges[index] = Range(r.start, unit_id - 1)
        suffix = Range(unit_id + 1, r.end)
        self._ranges.append(suffix)
        return suffix

    def overlaps(self) -> List[tuple]:
        """Pairs of stored ranges that overlap each other (should be empty)."""
        found = []
        ordered = sorted(self._ranges, key=lambda r: r.start)
        for a, b in zip(ordered, ordered[1:]):
            if a.overlaps(b):
                found.append((a, b))
        return found
