from __future__ import annotations

from typing import Any, List, Union

from yaml_source.domain.document import NodeKind, is_container, iter_children, node_kind
from yaml_source.domain.selector import Selector, resolve_path

ItemSelector = Union[int, Selector]


def select_items(document: Any, item_selector: ItemSelector) -> List[Any]:
    """
    Назначение:
        Находит в документе список элементов для итерации.

    Входные данные:
        document: Any
            Разобранный YAML (dict/list/скаляр).
        item_selector: int | Selector
            int - legacy-режим глубины, Selector - путь.

    Выходные данные:
        list
            Материализованный список элементов.

    Поведение:
        - Путь не разрешается -> SelectorLookupError (открытие источника прерывается).
    """
    if isinstance(item_selector, int) and not isinstance(item_selector, bool):
        return select_by_depth(document, item_selector)
    target = resolve_path(document, item_selector).unwrap()
    return as_item_list(target)


def as_item_list(target: Any) -> List[Any]:
    """
    Назначение:
        Превращает цель селектора в список элементов.

    Поведение:
        - sequence -> элементы; mapping -> значения в порядке документа;
        - None (пустой документ) -> [];
        - прочий скаляр передаётся как единственный элемент.
    """
    kind = node_kind(target)
    if kind is NodeKind.SEQUENCE:
        return list(target)
    if kind is NodeKind.MAPPING:
        return list(target.values())
    if target is None:
        return []
    return [target]


def select_by_depth(document: Any, depth: int) -> List[Any]:
    """
    Назначение:
        Legacy-выбор элементов по глубине (целочисленный item_selector).

    Алгоритм:
        - Pre-order обход явным стеком, глубина 0 - непосредственные дети корня.
        - Каждый mapping/sequence ровно на глубине depth попадает в результат
          в порядке обхода; скаляры не собираются.
        - Глубже depth обход не спускается.
    """
    items: List[Any] = []
    stack: List[tuple[Any, int]] = [(child, 0) for child in reversed(list(iter_children(document)))]
    while stack:
        node, level = stack.pop()
        if not is_container(node):
            continue
        if level == depth:
            items.append(node)
            continue
        children = list(iter_children(node))
        for child in reversed(children):
            stack.append((child, level + 1))
    return items
