"""A small ordered container with the operations the server code relies on."""

from __future__ import annotations

import copy
from typing import Any, Callable, Iterable, Iterator, Optional


class LinkedList:
    """Ordered collection storing copies of the values added to it."""

    def __init__(self, items: Optional[Iterable[Any]] = None) -> None:
        self._items: list[Any] = []
        for item in items or ():
            self.add_back(item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"LinkedList({self._items!r})"

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"index {index} out of range")

    def add_back(self, data: Any) -> None:
        """Append a copy of ``data``."""
        self._items.append(copy.copy(data))

    def add_front(self, data: Any) -> None:
        """Prepend a copy of ``data``."""
        self._items.insert(0, copy.copy(data))

    def delete_node(self, data: Any, match: Callable[[Any, Any], Any]) -> bool:
        """Remove the first element for which ``match(element, data)`` holds."""
        for position, item in enumerate(self._items):
            if match(item, data):
                del self._items[position]
                return True
        return False

    def delete_at(self, index: int) -> None:
        """Remove the element at ``index``."""
        self._check_index(index)
        del self._items[index]

    def modify_at(self, index: int, data: Any) -> None:
        """Replace the element at ``index`` with a copy of ``data``."""
        self._check_index(index)
        self._items[index] = copy.copy(data)

    def have_same(self, data: Any, match: Callable[[Any, Any], Any]) -> bool:
        """Tell whether any element satisfies ``match(element, data)``."""
        return any(match(item, data) for item in self._items)

    def have_different(self, data: Any) -> bool:
        """Tell whether any element differs from ``data``."""
        return any(item != data for item in self._items)

    def foreach(self, func: Callable[[Any], Any]) -> None:
        """Call ``func`` on each element in order."""
        for item in self._items:
            func(item)

    def sort(self, greater: Callable[[Any, Any], Any]) -> None:
        """Selection-sort in place; ``greater(a, b)`` is true when ``a`` sorts after ``b``."""
        items = self._items
        count = len(items)
        for i in range(count):
            smallest = i
            for j in range(i + 1, count):
                if greater(items[smallest], items[j]):
                    smallest = j
            if smallest != i:
                items[i], items[smallest] = items[smallest], items[i]

    def clear(self) -> None:
        """Remove every element."""
        self._items.clear()