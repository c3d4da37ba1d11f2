"""Set difference over unordered string collections."""

from __future__ import annotations

from collections.abc import Iterable


def diff_members(from_: Iterable[str], to: Iterable[str]) -> list[str]:
    """Return the members of *to* that are absent from *from_*.

    Duplicates collapse and the result keeps the order in which members first
    appear in *to*, so callers get a deterministic sequence.  Call it twice
    with the arguments swapped to get both additions and removals::

        added = diff_members(old, new)
        removed = diff_members(new, old)
    """
    seen = set(from_)
    result: list[str] = []
    for item in to:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result
