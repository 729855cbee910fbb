from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Union

from yaml_source.domain.selector import Selector, parse_selector
from yaml_source.errors import ConfigurationError

FieldSelectorMap = Dict[str, Selector]


@dataclass(frozen=True)
class BareField:
    """Поле, заданное только именем: селектор совпадает с именем."""

    name: str

    @property
    def selector(self) -> Selector:
        return parse_selector(self.name)


@dataclass(frozen=True)
class ExplicitField:
    """Поле с явным селектором."""

    name: str
    path: str

    @property
    def selector(self) -> Selector:
        return parse_selector(self.path)


FieldSpec = Union[BareField, ExplicitField]


def _entry_from_mapping(entry: Mapping[str, Any], default_name: str | None) -> FieldSpec:
    name = entry.get("name", default_name)
    if not isinstance(name, str) or not name:
        raise ConfigurationError(f"Field entry without a name: {dict(entry)!r}", option="fields")
    selector = entry.get("selector")
    if selector is None:
        return BareField(name)
    if not isinstance(selector, (str, int)) or isinstance(selector, bool):
        raise ConfigurationError(f"Field '{name}' has an invalid selector: {selector!r}", option="fields")
    return ExplicitField(name, str(selector))


def parse_field_specs(fields: Any) -> List[FieldSpec]:
    """
    Назначение:
        Приводит конфигурацию `fields` к списку FieldSpec.

    Входные данные:
        fields:
            - None -> полей нет;
            - список: строка (BareField) или mapping {name, selector?};
            - mapping: name -> строка-селектор | None | mapping {selector?, name?}.

    Поведение:
        - Некорректная запись -> ConfigurationError.
        - Запись без selector получает селектор, равный имени.
    """
    if fields is None:
        return []

    specs: List[FieldSpec] = []
    if isinstance(fields, Mapping):
        for key, value in fields.items():
            name = str(key)
            if value is None:
                specs.append(BareField(name))
            elif isinstance(value, str):
                specs.append(ExplicitField(name, value))
            elif isinstance(value, Mapping):
                specs.append(_entry_from_mapping(value, default_name=name))
            else:
                raise ConfigurationError(f"Field '{name}' has an invalid definition: {value!r}", option="fields")
        return specs

    if isinstance(fields, (list, tuple)):
        for entry in fields:
            if isinstance(entry, str) and entry:
                specs.append(BareField(entry))
            elif isinstance(entry, Mapping):
                specs.append(_entry_from_mapping(entry, default_name=None))
            else:
                raise ConfigurationError(f"Invalid field entry: {entry!r}", option="fields")
        return specs

    raise ConfigurationError("'fields' must be a list or a mapping", option="fields")


def build_field_selectors(specs: Iterable[FieldSpec]) -> FieldSelectorMap:
    """
    Назначение:
        Строит FieldSelectorMap (имя -> Selector) в порядке конфигурации.

    Поведение:
        - Повтор имени поля -> ConfigurationError.
    """
    selectors: FieldSelectorMap = {}
    for spec in specs:
        if spec.name in selectors:
            raise ConfigurationError(f"Duplicate field name: {spec.name}", option="fields")
        selectors[spec.name] = spec.selector
    return selectors
