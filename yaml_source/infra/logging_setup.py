from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

LOGGER_ROOT = "yamlSource"

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(runId)s] %(component)s: %(message)s"

_LEVELS = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


class RunFieldsFilter(logging.Filter):
    """
    Назначение:
        Подставляет runId/component в записи, пришедшие без extra
        (например, из логгера парсера по умолчанию).
    """

    def __init__(self, runId: str):
        super().__init__()
        self.runId = runId

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "runId", None) in (None, "-"):
            record.runId = self.runId
        if not hasattr(record, "component"):
            record.component = record.name.rsplit(".", 1)[-1]
        return True


def parse_log_level(levelName: str | None) -> int:
    """ERROR|WARN|INFO|DEBUG -> уровень logging; неизвестное имя -> ValueError."""
    level = _LEVELS.get((levelName or "").strip().upper())
    if level is None:
        raise ValueError(f"Unsupported log level: {levelName}")
    return level


@dataclass
class CommandLog:
    """
    Назначение:
        Файловый лог одной команды CLI: логгер и путь к файлу.
    """

    logger: logging.Logger
    path: str
    runId: str

    def event(self, level: int, component: str, message: str) -> None:
        log_event(self.logger, level, component, message, self.runId)

    def close(self) -> None:
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


def open_command_log(command: str, logDir: str, runId: str, logLevel: str) -> CommandLog:
    """
    Назначение:
        Открывает <logDir>/<command>_<runId>.log и настраивает логгер
        yamlSource.<command>.<runId> без проброса в root.

    Поведение:
        - Повторное открытие с тем же runId закрывает прежние хендлеры.
    """
    level = parse_log_level(logLevel)
    Path(logDir).mkdir(parents=True, exist_ok=True)
    path = Path(logDir) / f"{command}_{runId}.log"

    logger = logging.getLogger(f"{LOGGER_ROOT}.{command}.{runId}")
    CommandLog(logger, str(path), runId).close()
    logger.propagate = False
    logger.setLevel(level)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    handler.addFilter(RunFieldsFilter(runId))
    logger.addHandler(handler)

    return CommandLog(logger, str(path), runId)


def log_event(logger: logging.Logger, level: int, component: str, message: str, runId: str | None = None) -> None:
    logger.log(level, message, extra={"runId": runId or "-", "component": component})
