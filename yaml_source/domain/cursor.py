from __future__ import annotations

from typing import Any, Sequence


class ItemCursor:
    """
    Назначение/ответственность:
        Курсор по уже материализованному списку элементов одного источника.
        Пересоздаётся при каждом открытии URL; буферизации сверх списка нет.
    """

    def __init__(self, items: Sequence[Any]) -> None:
        self._items = items
        self._position = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def position(self) -> int:
        return self._position

    def at_end(self) -> bool:
        return self._position >= len(self._items)

    def current(self) -> Any | None:
        if self.at_end():
            return None
        return self._items[self._position]

    def advance(self) -> None:
        if not self.at_end():
            self._position += 1
