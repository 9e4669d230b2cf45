"""
Identifier set helpers

A search accumulates calibration IDs filter by filter. The accumulator
is None until the first filter has run: None means "not filtered yet",
an empty list means "a filter ran and matched nothing".
"""
from typing import Iterable, List, Optional

IdentifierSet = Optional[List[int]]


def merge_ids(current: IdentifierSet, incoming: Iterable[int]) -> List[int]:
    """
    Merge a filter's result into the accumulator.

    The first filter replaces the accumulator outright, even when it is
    empty. Later filters intersect, keeping the accumulator's order.
    """
    if current is None:
        return list(incoming)

    keep = set(incoming)
    return [i for i in current if i in keep]


def unique_in_order(ids: Iterable[int]) -> List[int]:
    """Drop repeated IDs, keeping the first occurrence of each"""
    seen = set()
    unique = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            unique.append(i)
    return unique
