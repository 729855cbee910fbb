from __future__ import annotations

import json
import time
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from yaml_source.errors import AppError, FieldLookupError
from yaml_source.reporting.models import FieldFailure, RunTotals, SourceStats

DEFAULT_SAMPLES_LIMIT = 10


class SourceRunReport:
    """
    Назначение/ответственность:
        Отчёт одного запуска команды над источником миграции.
        Ведёт итоги по каждому URL и группирует падения строк по полю,
        чтобы было видно, какой селектор не подходит к данным.

    Статус:
        - FAILED  - ошибка конфигурации/открытия URL или ни одной успешной строки;
        - PARTIAL - часть строк упала на селекторах полей;
        - SUCCESS - всё прочитано.
    """

    def __init__(
        self,
        run_id: str,
        command: str,
        migration_path: str | None = None,
        config_sources: list[str] | None = None,
        samples_limit: int | None = DEFAULT_SAMPLES_LIMIT,
    ) -> None:
        self.run_id = run_id
        self.command = command
        self.migration_path = migration_path
        self.config_sources = list(config_sources or [])
        self.samples_limit = samples_limit

        self.started_at = _now_iso()
        self.finished_at: str | None = None
        self.duration_ms: int | None = None
        self.log_file: str | None = None
        self._started = time.monotonic()

        self.sources: dict[str, SourceStats] = {}
        self.field_failures: dict[str, FieldFailure] = {}
        self.error: dict[str, Any] | None = None

    def source(self, url: str) -> SourceStats:
        stats = self.sources.get(url)
        if stats is None:
            stats = SourceStats(url=url)
            self.sources[url] = stats
        return stats

    def record_items_selected(self, url: str, items: int) -> None:
        self.source(url).items_selected = items

    def record_row_ok(self, url: str | None) -> None:
        if url is not None:
            self.source(url).rows_ok += 1

    def record_row_failed(self, url: str | None, exc: FieldLookupError) -> None:
        if url is not None:
            self.source(url).rows_failed += 1

        failure = self.field_failures.get(exc.field_name)
        if failure is None:
            failure = FieldFailure(field=exc.field_name, selector=exc.details.get("selector"))
            self.field_failures[exc.field_name] = failure
        failure.rows += 1

        if self.samples_limit is not None and len(failure.samples) >= self.samples_limit:
            failure.samples_truncated = True
            return
        failure.samples.append(
            {
                "url": url,
                "position": exc.details.get("position"),
                "segment": exc.details.get("segment"),
            }
        )

    def record_source_error(self, url: str | None, exc: AppError) -> None:
        """
        Назначение:
            Фиксирует ошибку, прервавшую открытие URL; запуск считается FAILED.
        """
        if url is not None:
            self.source(url).error = exc.to_dict()
        self.error = exc.to_dict()

    def fail(self, message: str, code: str = "CONFIG_INVALID") -> None:
        self.error = {"code": code, "message": message}

    def totals(self) -> RunTotals:
        totals = RunTotals(sources=len(self.sources))
        for stats in self.sources.values():
            totals.items_selected += stats.items_selected or 0
            totals.rows_ok += stats.rows_ok
            totals.rows_failed += stats.rows_failed
        return totals

    def status(self) -> str:
        if self.error is not None:
            return "FAILED"
        totals = self.totals()
        if totals.rows_failed == 0:
            return "SUCCESS"
        if totals.rows_ok > 0:
            return "PARTIAL"
        return "FAILED"

    def close(self, log_file: str | None = None) -> None:
        self.finished_at = _now_iso()
        self.duration_ms = int((time.monotonic() - self._started) * 1000)
        self.log_file = log_file

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status(),
            "meta": {
                "run_id": self.run_id,
                "command": self.command,
                "migration_path": self.migration_path,
                "started_at": self.started_at,
                "finished_at": self.finished_at,
                "duration_ms": self.duration_ms,
                "log_file": self.log_file,
                "config_sources": self.config_sources,
            },
            "totals": asdict(self.totals()),
            "sources": [asdict(stats) for stats in self.sources.values()],
            "field_failures": [asdict(failure) for failure in self.field_failures.values()],
            "error": self.error,
        }

    def write_json(self, report_dir: str) -> str:
        """
        Назначение:
            Пишет report_<command>_<run_id>.json и возвращает путь к файлу.
        """
        Path(report_dir).mkdir(parents=True, exist_ok=True)
        path = Path(report_dir) / f"report_{self.command}_{self.run_id}.json"
        path.write_text(json.dumps(self.to_dict(), ensure_ascii=False, indent=2, default=str), encoding="utf-8")
        return str(path)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
