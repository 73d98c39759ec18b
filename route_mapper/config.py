"""
Модуль для загрузки и валидации параметров обхода RouteMapper.
Используется Pydantic для описания схемы и проверки данных.
Все интервалы задаются в миллисекундах.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def _lower_camel(name: str) -> str:
    camel = to_camel(name)
    return camel[:1].lower() + camel[1:]


class CrawlOptions(BaseModel):
    """Параметры одного запуска обхода."""
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=_lower_camel,
        populate_by_name=True,
    )

    max_depth: int = Field(2, ge=0, description="Максимальная глубина рекурсии (включительно).")
    max_pages: int = Field(50, ge=1, description="Жесткий лимит по числу загруженных страниц.")
    timeout: int = Field(10_000, gt=0, description="Таймаут одной попытки запроса (мс).")
    delay: int = Field(500, ge=0, description="Пауза перед каждым запросом, кроме первого (мс).")
    retries: int = Field(2, ge=0, description="Число повторов после первой неудачной попытки.")
    retry_backoff: int = Field(1_000, ge=0, description="Шаг линейной паузы между попытками (мс).")
    concurrency: int = Field(8, ge=1, description="Максимум одновременно обрабатываемых страниц.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")

    @property
    def timeout_s(self) -> float:
        return self.timeout / 1000

    @property
    def delay_s(self) -> float:
        return self.delay / 1000

    def backoff_s(self, attempt: int) -> float:
        """Пауза перед повтором после неудачной попытки номер ``attempt`` (с 1)."""
        return self.retry_backoff * attempt / 1000


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlOptions:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlOptions.
    Без пути возвращает значения по умолчанию.
    При отсутствии файла бросает FileNotFoundError.
    """
    if path is None:
        return CrawlOptions()

    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return CrawlOptions.model_validate(data)


def merge_overrides(options: CrawlOptions, **overrides: Any) -> CrawlOptions:
    """Возвращает копию options с заданными (не None) полями, с повторной валидацией."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    if not changes:
        return options
    data = options.model_dump()
    data.update(changes)
    return CrawlOptions.model_validate(data)


__all__ = ["CrawlOptions", "DEFAULT_USER_AGENT", "ValidationError", "load_config", "merge_overrides"]
