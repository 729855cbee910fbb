from __future__ import annotations

from enum import Enum
from typing import Any, Iterator


class NodeKind(str, Enum):
    """
    Назначение:
        Тег узла разобранного YAML-документа.
    """

    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


def node_kind(value: Any) -> NodeKind:
    """
    Назначение:
        Классифицирует значение документа.

    Поведение:
        - dict -> MAPPING, list -> SEQUENCE.
        - Всё остальное (str/int/float/bool/None, даты, set) -> SCALAR.
    """
    if isinstance(value, dict):
        return NodeKind.MAPPING
    if isinstance(value, list):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def is_container(value: Any) -> bool:
    return node_kind(value) is not NodeKind.SCALAR


def iter_children(value: Any) -> Iterator[Any]:
    """
    Назначение:
        Дочерние узлы контейнера в порядке документа (значения mapping / элементы sequence).
        У скаляра детей нет.
    """
    kind = node_kind(value)
    if kind is NodeKind.MAPPING:
        yield from value.values()
    elif kind is NodeKind.SEQUENCE:
        yield from value
