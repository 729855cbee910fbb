from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from yaml_source.domain.error_codes import ErrorCode


@dataclass
class AppError(Exception):
    """
    Унифицированная ошибка приложения.
    """

    category: str
    code: str
    message: str
    retryable: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details or {},
        }


class ConfigurationError(AppError):
    """
    Назначение:
        Обязательная настройка источника отсутствует или задана неверно.
        Бросается при конструировании, до любого обращения к источнику.
    """

    def __init__(self, message: str, option: str | None = None):
        super().__init__(
            category="config",
            code=ErrorCode.CONFIG_INVALID.value,
            message=message,
            details={"option": option} if option else {},
        )
        self.option = option


class FetchError(AppError):
    """
    Назначение:
        Не удалось получить содержимое источника (сеть, HTTP-статус, файл).
    Контракт:
        - status_code/body_snippet заполняются для HTTP-ошибок.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        body_snippet: str | None = None,
        retryable: bool = False,
        code: ErrorCode = ErrorCode.FETCH_ERROR,
    ):
        details: Dict[str, Any] = {"url": url}
        if status_code is not None:
            details["status_code"] = status_code
        if body_snippet:
            details["body_snippet"] = body_snippet
        super().__init__(
            category="fetch",
            code=code.value,
            message=message,
            retryable=retryable,
            details=details,
        )
        self.url = url
        self.status_code = status_code
        self.body_snippet = body_snippet


class ParseError(AppError):
    """
    Назначение:
        Содержимое источника не является корректным YAML.
    """

    def __init__(self, message: str, url: str | None = None):
        super().__init__(
            category="parse",
            code=ErrorCode.INVALID_YAML.value,
            message=message,
            details={"url": url},
        )
        self.url = url


class SelectorLookupError(AppError, LookupError):
    """
    Назначение:
        Путь селектора не разрешается на фактической структуре документа.
    Контракт:
        - selector: исходные сегменты пути.
        - segment: сегмент, на котором обход остановился.
    """

    def __init__(
        self,
        message: str,
        selector: tuple[str, ...] = (),
        segment: str | None = None,
        code: ErrorCode = ErrorCode.ITEM_SELECTOR_NOT_FOUND,
    ):
        super().__init__(
            category="lookup",
            code=code.value,
            message=message,
            details={"selector": "/".join(selector), "segment": segment},
        )
        self.selector = selector
        self.segment = segment


class FieldLookupError(SelectorLookupError):
    """
    Назначение:
        Селектор поля не разрешается на текущем элементе; фатально для строки.
    """

    def __init__(self, field_name: str, cause: SelectorLookupError):
        super().__init__(
            f"Field '{field_name}': {cause.message}",
            selector=cause.selector,
            segment=cause.segment,
            code=ErrorCode.FIELD_SELECTOR_NOT_FOUND,
        )
        self.field_name = field_name
        self.details["field"] = field_name


__all__ = [
    "AppError",
    "ConfigurationError",
    "FetchError",
    "ParseError",
    "SelectorLookupError",
    "FieldLookupError",
]
