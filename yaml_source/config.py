from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable

import yaml

from yaml_source.errors import ConfigurationError

ENV_PREFIX = "YAML_SOURCE_"


@dataclass(frozen=True)
class Settings:
    """
    Назначение:
        Параметры запуска CLI: каталоги артефактов, уровень лога, политика HTTP-fetch.
    """

    log_dir: str = "./logs"
    report_dir: str = "./reports"
    log_level: str = "INFO"

    timeout_seconds: float = 20.0
    retries: int = 3
    retry_backoff_seconds: float = 0.5
    tls_skip_verify: bool = False
    ca_file: str | None = None


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


def parse_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "y", "on"):
        return True
    if lowered in ("0", "false", "no", "n", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {value}")


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "log_dir": str,
    "report_dir": str,
    "log_level": str,
    "timeout_seconds": float,
    "retries": int,
    "retry_backoff_seconds": float,
    "tls_skip_verify": lambda v: v if isinstance(v, bool) else parse_bool(str(v)),
    "ca_file": _optional_str,
}


def _read_settings_file(path: Path) -> dict[str, Any]:
    """Плоский mapping настроек из YAML; отсутствующий или не-mapping файл -> {}."""
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return {}
    return {name: data[name] for name in _CONVERTERS if name in data}


def _read_settings_env() -> dict[str, str]:
    layer: dict[str, str] = {}
    for name in _CONVERTERS:
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is not None and raw.strip():
            layer[name] = raw.strip()
    return layer


def load_settings(config_path: str | None, cli_overrides: dict) -> LoadedSettings:
    """
    Назначение:
        Собирает Settings из слоёв: defaults < config file < ENV (YAML_SOURCE_*) < CLI.

    Выходные данные:
        LoadedSettings - итоговые настройки и список слоёв, давших хотя бы одно значение
        (в порядке применения: config, env, cli).
    """
    layers = [
        ("config", _read_settings_file(Path(config_path)) if config_path else {}),
        ("env", _read_settings_env()),
        ("cli", {k: v for k, v in cli_overrides.items() if v is not None and k in _CONVERTERS}),
    ]

    values: dict[str, Any] = {f.name: getattr(Settings(), f.name) for f in fields(Settings)}
    sources: list[str] = []
    for layerName, layer in layers:
        if not layer:
            continue
        sources.append(layerName)
        for name, value in layer.items():
            values[name] = _CONVERTERS[name](value)

    return LoadedSettings(settings=Settings(**values), sources_used=sources)


def load_migration_source(path: str) -> dict:
    """
    Назначение:
        Читает YAML-описание миграции и возвращает его секцию `source`.

    Поведение:
        - Файл не читается, не является YAML или не содержит mapping `source`
          -> ConfigurationError.
        - Для data_fetcher_plugin=file относительные URL разрешаются
          относительно каталога описания (ключ base_dir).
    """
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read migration definition {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Migration definition {path} is not valid YAML: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("source"), dict):
        raise ConfigurationError(f"Migration definition {path} has no 'source' mapping", option="source")

    source = dict(data["source"])
    source.setdefault("base_dir", str(p.resolve().parent))
    return source


SECRET_MASK = "***"
SECRET_HEADERS = ("authorization", "proxy-authorization", "cookie", "x-api-key")


def mask_source_secrets(source: dict) -> dict:
    """
    Назначение:
        Копия секции source для логов: пароль authentication и значения
        заголовков с учётными данными заменены на ***.
    """
    masked = dict(source)

    auth = masked.get("authentication")
    if isinstance(auth, dict) and auth.get("password") is not None:
        masked["authentication"] = {**auth, "password": SECRET_MASK}

    headers = masked.get("headers")
    if isinstance(headers, dict):
        masked["headers"] = {
            name: SECRET_MASK if _is_secret_header(str(name)) else value for name, value in headers.items()
        }
    return masked


def _is_secret_header(name: str) -> bool:
    lowered = name.lower()
    return lowered in SECRET_HEADERS or "token" in lowered or "secret" in lowered
