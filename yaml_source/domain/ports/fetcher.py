from __future__ import annotations

from typing import Protocol


class DataFetcherProtocol(Protocol):
    """
    Назначение/ответственность:
        Получение сырого содержимого источника по URL/идентификатору.
    Взаимодействия:
        Используется YamlDataParser при открытии каждого URL.
    """

    def get_response_content(self, url: str) -> bytes:
        """
        Контракт:
            Вход: URL или путь.
            Выход: байты содержимого; ошибка получения -> FetchError.
        """
        ...
