from .errors import (
    AppError,
    ConfigurationError,
    FetchError,
    FieldLookupError,
    ParseError,
    SelectorLookupError,
)
from .parser import YamlDataParser

__all__ = [
    "AppError",
    "ConfigurationError",
    "FetchError",
    "FieldLookupError",
    "ParseError",
    "SelectorLookupError",
    "YamlDataParser",
]
