from __future__ import annotations

from typing import Iterator, List


class PrincipalSet:
    """Unordered collection of principal ids with O(1) removal.

    Removal moves the last element into the freed slot, so iteration order
    is not stable across removals. Membership is a linear scan. The
    container does not reject duplicates; callers check ``in`` first.
    """

    def __init__(self) -> None:
        self._items: List[str] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __contains__(self, principal: object) -> bool:
        return self.index_of(principal) != -1

    def __repr__(self) -> str:
        return f"PrincipalSet({self._items!r})"

    def index_of(self, principal: object) -> int:
        for index, item in enumerate(self._items):
            if item == principal:
                return index
        return -1

    def append(self, principal: str) -> None:
        self._items.append(principal)

    def swap_remove(self, principal: str) -> bool:
        """Remove the first occurrence of *principal*; False if absent."""
        index = self.index_of(principal)
        if index == -1:
            return False
        self._items[index] = self._items[-1]
        self._items.pop()
        return True

    def to_list(self) -> List[str]:
        return list(self._items)


__all__ = ["PrincipalSet"]
