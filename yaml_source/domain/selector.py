from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from yaml_source.domain.document import NodeKind, node_kind
from yaml_source.errors import SelectorLookupError

Selector = Tuple[str, ...]

_MISSING = object()


def parse_selector(path: str) -> Selector:
    """
    Назначение:
        Разбивает путь вида "a/b/c" на сегменты.

    Поведение:
        - Пустые сегменты отбрасываются: "/a//b/" -> ("a", "b"), "" -> ().
        - Сегмент "0" сохраняется.
        - Пустой селектор означает "корень без обхода".
    """
    return tuple(segment for segment in path.split("/") if segment != "")


def format_selector(selector: Selector) -> str:
    return "/".join(selector) if selector else "<root>"


@dataclass(frozen=True)
class PathResult:
    """
    Назначение:
        Результат обхода документа по селектору: значение либо ошибка поиска.
    """

    value: Any = None
    error: SelectorLookupError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


def _parse_index(segment: str) -> int | None:
    if segment.isdigit() and segment.isascii():
        return int(segment)
    return None


def _step(current: Any, segment: str) -> Any:
    kind = node_kind(current)
    if kind is NodeKind.MAPPING:
        if segment in current:
            return current[segment]
        index = _parse_index(segment)
        if index is not None and index in current:
            return current[index]
        return _MISSING
    if kind is NodeKind.SEQUENCE:
        index = _parse_index(segment)
        if index is None or index >= len(current):
            return _MISSING
        return current[index]
    return _MISSING


def resolve_path(document: Any, selector: Selector) -> PathResult:
    """
    Назначение:
        Проходит документ по сегментам селектора.

    Алгоритм:
        - mapping индексируется сегментом как ключом (для "12" дополнительно пробуется int-ключ 12);
        - sequence индексируется сегментом как неотрицательным целым;
        - на скаляре, при отсутствующем ключе или индексе вне диапазона
          возвращается PathResult с SelectorLookupError.
    """
    current = document
    for position, segment in enumerate(selector):
        nxt = _step(current, segment)
        if nxt is _MISSING:
            walked = format_selector(selector[:position])
            error = SelectorLookupError(
                f"Selector '{format_selector(selector)}' does not resolve: "
                f"no '{segment}' in {node_kind(current).value} at '{walked}'",
                selector=selector,
                segment=segment,
            )
            return PathResult(error=error)
        current = nxt
    return PathResult(value=current)
