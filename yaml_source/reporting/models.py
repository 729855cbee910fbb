from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SourceStats:
    """
    Назначение:
        Итоги по одному URL источника.

    Поля:
        items_selected - число элементов, выбранных item_selector (None, если URL не открывался целиком);
        rows_ok/rows_failed - строки, собранные и упавшие на селекторах полей;
        error - ошибка открытия URL (fetch/parse/item_selector), если была.
    """

    url: str
    items_selected: int | None = None
    rows_ok: int = 0
    rows_failed: int = 0
    error: dict[str, Any] | None = None


@dataclass
class FieldFailure:
    """
    Назначение:
        Сводка падений одного селектора поля: сколько строк и где именно.
    """

    field: str
    selector: str | None
    rows: int = 0
    samples: list[dict[str, Any]] = field(default_factory=list)
    samples_truncated: bool = False


@dataclass
class RunTotals:
    sources: int = 0
    items_selected: int = 0
    rows_ok: int = 0
    rows_failed: int = 0
