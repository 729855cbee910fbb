from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Tuple

import yaml

from yaml_source.config import Settings
from yaml_source.domain.cursor import ItemCursor
from yaml_source.domain.extractor import RAW_FIELD, CurrentItem, extract_item
from yaml_source.domain.field_spec import FieldSelectorMap, build_field_selectors, parse_field_specs
from yaml_source.domain.navigator import ItemSelector, select_items
from yaml_source.domain.ports.fetcher import DataFetcherProtocol
from yaml_source.domain.selector import parse_selector
from yaml_source.errors import ConfigurationError, FieldLookupError, ParseError
from yaml_source.infra.fetchers.factory import create_fetcher
from yaml_source.infra.logging_setup import LOGGER_ROOT, log_event


def _normalize_ids(ids: Any) -> Tuple[str, ...]:
    if isinstance(ids, Mapping):
        names = [str(key) for key in ids.keys()]
    elif isinstance(ids, (list, tuple)):
        names = [str(name) for name in ids]
    else:
        names = []
    if not names:
        raise ConfigurationError(
            'You must declare "ids" as a unique array of fields in your source settings.',
            option="ids",
        )
    if len(set(names)) != len(names):
        raise ConfigurationError('"ids" must not contain duplicate fields', option="ids")
    return tuple(names)


def _normalize_urls(urls: Any) -> Tuple[str, ...]:
    if isinstance(urls, str):
        urls = [urls]
    if not isinstance(urls, (list, tuple)) or not urls:
        raise ConfigurationError('You must declare "urls" (a string or a list of strings).', option="urls")
    for url in urls:
        if not isinstance(url, str) or not url:
            raise ConfigurationError(f"Invalid source url: {url!r}", option="urls")
    return tuple(urls)


def _normalize_item_selector(value: Any) -> ItemSelector:
    if value is None:
        return parse_selector("")
    if isinstance(value, bool):
        raise ConfigurationError("item_selector must be a path string or a depth integer", option="item_selector")
    if isinstance(value, int):
        if value < 0:
            raise ConfigurationError("item_selector depth must be non-negative", option="item_selector")
        return value
    if isinstance(value, str):
        return parse_selector(value)
    raise ConfigurationError("item_selector must be a path string or a depth integer", option="item_selector")


def _check_ids_are_fields(ids: Tuple[str, ...], field_selectors: FieldSelectorMap) -> None:
    missing = [name for name in ids if name not in field_selectors]
    if missing:
        raise ConfigurationError(
            f'"ids" must be listed in "fields": missing {", ".join(missing)}',
            option="ids",
        )


class YamlDataParser:
    """
    Назначение/ответственность:
        Источник строк миграции из YAML-документов.
        Для каждого URL: fetch -> yaml.safe_load -> выбор списка элементов
        (путь или legacy-глубина) -> курсор -> сборка записи по селекторам полей.

    Контракт строки:
        - rewind()/next()/valid()/current()/key() - курсорный интерфейс хоста;
        - __iter__ - ленивый проход по всем URL с начала;
        - count() - число выбранных элементов по всем URL.

    Ошибки:
        - ConfigurationError - в конструкторе, до любого fetch;
        - FetchError/ParseError/SelectorLookupError - прерывают открытие URL;
        - FieldLookupError - только текущая строка; курсор уже сдвинут,
          повторный next() продолжает со следующего элемента.
    """

    def __init__(
        self,
        configuration: Mapping[str, Any],
        fetcher: DataFetcherProtocol | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
        runId: str | None = None,
    ):
        self.ids = _normalize_ids(configuration.get("ids"))
        self.urls = _normalize_urls(configuration.get("urls"))
        self.item_selector = _normalize_item_selector(configuration.get("item_selector", ""))
        self.field_selectors: FieldSelectorMap = build_field_selectors(
            parse_field_specs(configuration.get("fields"))
        )
        self.include_raw_data = bool(configuration.get("include_raw_data", False))
        _check_ids_are_fields(self.ids, self.field_selectors)
        if self.include_raw_data and RAW_FIELD in self.field_selectors:
            raise ConfigurationError(
                f'Field "{RAW_FIELD}" is reserved for the raw item when "include_raw_data" is on',
                option="fields",
            )
        self.configuration = dict(configuration)

        self.fetcher = fetcher if fetcher is not None else create_fetcher(configuration, settings)
        self.logger = logger or logging.getLogger(f"{LOGGER_ROOT}.parser")
        self.runId = runId

        self.active_url: int | None = None
        self.cursor: ItemCursor | None = None
        self.current_item: CurrentItem | None = None
        self.current_id: Dict[str, Any] | None = None

    def get_source_data(self, url: str) -> List[Any]:
        """
        Назначение:
            Получает и разбирает YAML по URL, возвращает выбранный список элементов.
        """
        content = self.fetcher.get_response_content(url)
        try:
            document = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ParseError(f"Invalid YAML in {url}: {exc}", url=url) from exc
        return select_items(document, self.item_selector)

    def open_source_url(self, url: str) -> bool:
        """
        Назначение:
            (Пере)открывает URL: заново разбирает документ и ставит курсор на первый элемент.
        """
        items = self.get_source_data(url)
        self.cursor = ItemCursor(items)
        log_event(self.logger, logging.DEBUG, "parser", f"source opened url={url} items={len(items)}", self.runId)
        return True

    def fetch_next_row(self) -> None:
        """
        Назначение:
            Собирает current_item из текущего элемента курсора и сдвигает курсор.

        Поведение:
            - Курсор в конце -> current_item остаётся None.
            - Курсор сдвигается до извлечения, FieldLookupError не блокирует следующие строки.
        """
        if self.cursor is None or self.cursor.at_end():
            return
        item = self.cursor.current()
        self.cursor.advance()
        self.current_item = extract_item(item, self.field_selectors, self.include_raw_data)

    def next_source(self) -> bool:
        while self.active_url is None or self.active_url < len(self.urls) - 1:
            self.active_url = 0 if self.active_url is None else self.active_url + 1
            if self.open_source_url(self.urls[self.active_url]):
                return True
        return False

    def next(self) -> None:
        self.current_item = None
        self.current_id = None
        if self.active_url is None:
            if not self.next_source():
                return
        while self.current_item is None:
            if self.cursor is not None and not self.cursor.at_end():
                try:
                    self.fetch_next_row()
                except FieldLookupError as exc:
                    exc.details["url"] = self.current_url()
                    exc.details["position"] = self.cursor.position - 1
                    log_event(
                        self.logger,
                        logging.WARNING,
                        "parser",
                        f"row failed url={exc.details['url']} position={exc.details['position']} error={exc}",
                        self.runId,
                    )
                    raise
                continue
            if not self.next_source():
                return
        self.current_id = {name: self.current_item[name] for name in self.ids}

    def rewind(self) -> None:
        self.active_url = None
        self.cursor = None
        self.next()

    def valid(self) -> bool:
        return self.current_item is not None

    def current(self) -> CurrentItem | None:
        return self.current_item

    def key(self) -> Dict[str, Any] | None:
        return self.current_id

    def current_url(self) -> str | None:
        if self.active_url is None:
            return None
        return self.urls[self.active_url]

    def __iter__(self) -> Iterator[CurrentItem]:
        self.rewind()
        while self.valid():
            yield self.current_item
            self.next()

    def count(self) -> int:
        """
        Назначение:
            Общее число выбранных элементов по всем URL (без сборки полей).
        """
        return sum(len(self.get_source_data(url)) for url in self.urls)
