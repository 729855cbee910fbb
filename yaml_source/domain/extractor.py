from __future__ import annotations

from typing import Any, Dict

from yaml_source.domain.field_spec import FieldSelectorMap
from yaml_source.domain.selector import resolve_path
from yaml_source.errors import FieldLookupError

RAW_FIELD = "raw"

CurrentItem = Dict[str, Any]


def extract_item(item: Any, field_selectors: FieldSelectorMap, include_raw: bool = False) -> CurrentItem:
    """
    Назначение:
        Собирает запись строки из одного элемента источника.

    Алгоритм:
        - Для каждой пары (имя, селектор) в порядке конфигурации проходит item
          так же, как item_selector в режиме пути.
        - Пустой селектор даёт сам item.
        - include_raw добавляет ключ "raw" с исходным элементом.

    Поведение:
        - Неразрешённый селектор -> FieldLookupError, строка не собирается.
    """
    current: CurrentItem = {}
    for name, selector in field_selectors.items():
        result = resolve_path(item, selector)
        if result.error is not None:
            raise FieldLookupError(name, result.error) from result.error
        current[name] = result.value
    if include_raw:
        current[RAW_FIELD] = item
    return current
