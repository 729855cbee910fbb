from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path

import typer

from yaml_source.config import Settings, load_migration_source, load_settings, mask_source_secrets
from yaml_source.errors import ConfigurationError, FetchError, FieldLookupError, ParseError, SelectorLookupError
from yaml_source.infra.logging_setup import CommandLog, open_command_log
from yaml_source.parser import YamlDataParser
from yaml_source.reporting.collector import DEFAULT_SAMPLES_LIMIT, SourceRunReport

app = typer.Typer(no_args_is_help=True, add_completion=False)

SOURCE_ERRORS = (FetchError, ParseError, SelectorLookupError)


def ensureDir(path: str) -> None:
    """
    Назначение:
        Создаёт каталог, если он отсутствует.
    """
    Path(path).mkdir(parents=True, exist_ok=True)


def requireMigration(migrationPath: str | None) -> None:
    """
    Назначение:
        Базовая проверка наличия файла описания миграции.

    Поведение:
        - Если путь не задан или файл не существует - завершает процесс с exit code 2.
    """
    if not migrationPath:
        typer.echo("ERROR: --migration is required", err=True)
        raise typer.Exit(code=2)

    p = Path(migrationPath)
    if not p.exists() or not p.is_file():
        typer.echo(f"ERROR: migration file not found: {migrationPath}", err=True)
        raise typer.Exit(code=2)


def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    """
    Назначение:
        Печатает сводку параметров запуска в stderr (stdout занят записями).
    """
    typer.echo(
        f"run_id={runId} command={command} "
        f"log_level={settings.log_level} timeout_seconds={settings.timeout_seconds} "
        f"retries={settings.retries} tls_skip_verify={settings.tls_skip_verify} sources={sources}",
        err=True,
    )


def createParser(migrationPath: str, settings: Settings, log: CommandLog) -> YamlDataParser:
    source = load_migration_source(migrationPath)
    masked = json.dumps(mask_source_secrets(source), ensure_ascii=False, default=str)
    log.event(logging.INFO, "config", f"source config: {masked}")
    return YamlDataParser(source, settings=settings, logger=log.logger, runId=log.runId)


def reportSourceError(log: CommandLog, report: SourceRunReport, url: str | None, exc) -> int:
    log.event(logging.ERROR, exc.category, f"Source open failed: {exc}")
    typer.echo(f"ERROR: {exc}", err=True)
    report.record_source_error(url, exc)
    return 2


def runWithReport(
    ctx: typer.Context,
    commandName: str,
    migrationPath: str | None,
    runner,
    samplesLimit: int | None = DEFAULT_SAMPLES_LIMIT,
) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - открывает лог команды
        - создаёт отчёт по источнику
        - валидирует наличие файла миграции
        - гарантирует запись отчёта в finally

    Контракт:
        runner(parser, log, report) -> exit code; парсер уже создан,
        ошибки конфигурации источника обрабатываются здесь (exit code 2).
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    log = open_command_log(commandName, settings.log_dir, runId, settings.log_level)
    report = SourceRunReport(
        run_id=runId,
        command=commandName,
        migration_path=migrationPath,
        config_sources=sources,
        samples_limit=samplesLimit,
    )
    exitCode: int | None = None

    try:
        log.event(logging.INFO, "core", "Command started")
        printRunHeader(runId, commandName, settings, sources)

        try:
            requireMigration(migrationPath)
        except typer.Exit:
            log.event(logging.ERROR, "config", "Migration definition is missing or not accessible")
            report.fail(f"migration definition not found: {migrationPath}")
            exitCode = 2
            return

        try:
            parser = createParser(migrationPath, settings, log)
        except ConfigurationError as exc:
            log.event(logging.ERROR, "config", f"Invalid source configuration: {exc}")
            typer.echo(f"ERROR: invalid source configuration: {exc}", err=True)
            report.record_source_error(None, exc)
            exitCode = 2
            return

        exitCode = runner(parser, log, report)

    finally:
        report.close(log_file=log.path)
        reportPath = report.write_json(settings.report_dir)
        log.event(logging.INFO, "report", f"Report written: {reportPath} status={report.status()}")
        log.close()

        if exitCode is not None:
            raise typer.Exit(code=exitCode)


def runPreviewCommand(
    ctx: typer.Context,
    migrationPath: str | None,
    limit: int | None,
    stopOnFirstError: bool,
    samplesLimit: int | None = DEFAULT_SAMPLES_LIMIT,
) -> None:
    def execute(parser: YamlDataParser, log: CommandLog, report: SourceRunReport) -> int:
        emitted = 0
        failed = 0
        first = True

        while True:
            try:
                if first:
                    first = False
                    parser.rewind()
                else:
                    parser.next()
            except FieldLookupError as exc:
                failed += 1
                report.record_row_failed(parser.current_url(), exc)
                if stopOnFirstError:
                    typer.echo(f"ERROR: {exc}", err=True)
                    break
                continue
            except SOURCE_ERRORS as exc:
                return reportSourceError(log, report, parser.current_url(), exc)

            if not parser.valid():
                break

            typer.echo(json.dumps({"ids": parser.key(), "row": parser.current()}, ensure_ascii=False, default=str))
            report.record_row_ok(parser.current_url())
            emitted += 1
            if limit is not None and emitted >= limit:
                break

        log.event(logging.INFO, "preview", f"preview done rows_ok={emitted} rows_failed={failed}")
        return 1 if failed > 0 else 0

    runWithReport(
        ctx=ctx,
        commandName="preview",
        migrationPath=migrationPath,
        runner=execute,
        samplesLimit=samplesLimit,
    )


def runCountCommand(ctx: typer.Context, migrationPath: str | None) -> None:
    def execute(parser: YamlDataParser, log: CommandLog, report: SourceRunReport) -> int:
        total = 0
        for url in parser.urls:
            try:
                items = len(parser.get_source_data(url))
            except SOURCE_ERRORS as exc:
                return reportSourceError(log, report, url, exc)
            report.record_items_selected(url, items)
            log.event(logging.INFO, "count", f"url={url} items={items}")
            total += items

        typer.echo(f"rows_total={total}")
        return 0

    runWithReport(
        ctx=ctx,
        commandName="count",
        migrationPath=migrationPath,
        runner=execute,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    reportDir: str | None = typer.Option(None, "--report-dir", help="Directory for reports."),
    timeoutSeconds: float | None = typer.Option(None, "--timeout-seconds", help="HTTP timeout in seconds"),
    retries: int | None = typer.Option(None, "--retries", help="Retry attempts for HTTP fetches"),
    retryBackoffSeconds: float | None = typer.Option(None, "--retry-backoff-seconds", help="Base backoff for retries"),
    tlsSkipVerify: bool | None = typer.Option(None, "--tls-skip-verify", help="Disable TLS verification"),
    caFile: str | None = typer.Option(None, "--ca-file", help="CA file path"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталоги log/report
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = str(uuid.uuid4())

    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "report_dir": reportDir,
        "timeout_seconds": timeoutSeconds,
        "retries": retries,
        "retry_backoff_seconds": retryBackoffSeconds,
        "tls_skip_verify": tlsSkipVerify,
        "ca_file": caFile,
    }
    loaded = load_settings(config_path=config, cli_overrides=cliOverrides)

    ensureDir(loaded.settings.log_dir)
    ensureDir(loaded.settings.report_dir)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
    }


@app.command()
def preview(
    ctx: typer.Context,
    migration: str | None = typer.Option(None, "--migration", help="Path to migration definition YAML"),
    limit: int | None = typer.Option(None, "--limit", help="Stop after N records"),
    stopOnFirstError: bool = typer.Option(
        False, "--stop-on-first-error/--continue-on-error", help="Stop at the first failed row"
    ),
    samplesLimit: int = typer.Option(
        DEFAULT_SAMPLES_LIMIT, "--report-samples-limit", help="Failed rows kept per field in the report"
    ),
):
    runPreviewCommand(ctx, migration, limit, stopOnFirstError, samplesLimit)


@app.command()
def count(
    ctx: typer.Context,
    migration: str | None = typer.Option(None, "--migration", help="Path to migration definition YAML"),
):
    runCountCommand(ctx, migration)


if __name__ == "__main__":
    app()
