from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок источника.
    """

    CONFIG_INVALID = "CONFIG_INVALID"
    FETCH_ERROR = "FETCH_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    FILE_NOT_READABLE = "FILE_NOT_READABLE"
    INVALID_YAML = "INVALID_YAML"
    ITEM_SELECTOR_NOT_FOUND = "ITEM_SELECTOR_NOT_FOUND"
    FIELD_SELECTOR_NOT_FOUND = "FIELD_SELECTOR_NOT_FOUND"
