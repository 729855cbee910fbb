from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

from yaml_source.domain.error_codes import ErrorCode
from yaml_source.errors import FetchError


class FileDataFetcher:
    """
    Назначение/ответственность:
        Чтение источника с локального диска (путь или file:// URL).
    """

    def __init__(self, baseDir: str | None = None) -> None:
        self.baseDir = baseDir

    def resolvePath(self, url: str) -> Path:
        if url.startswith("file://"):
            path = Path(unquote(urlparse(url).path))
        else:
            path = Path(url)
        if not path.is_absolute() and self.baseDir:
            path = Path(self.baseDir) / path
        return path

    def get_response_content(self, url: str) -> bytes:
        path = self.resolvePath(url)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FetchError(
                f"Cannot read source file {path}: {exc.strerror or exc}",
                url=url,
                code=ErrorCode.FILE_NOT_READABLE,
            ) from exc
