# image_scout/config.py
"""
Конфигурация одного запуска ImageScout: схема (pydantic) и загрузка из YAML/JSON.

Файл читается целиком, верхний уровень обязан быть mapping; всё остальное
проверяет :class:`CrawlerConfig` (лишние ключи запрещены).
"""
from __future__ import annotations

import errno
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from image_scout.transforms import TransformType
from image_scout.utils import normalize_url


class StrategyName(str, Enum):
    """Стратегии обхода, взаимозаменяемые по результату."""

    SEQUENTIAL = "sequential"
    FORK_JOIN = "fork_join"
    FUTURES = "futures"


class CrawlerConfig(BaseModel):
    """Конфигурация для одного запуска краулера."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    root_url: str = Field(..., min_length=1, description="Корневой URL или локальный путь.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    download_path: Path = Field(Path("downloaded-images"), description="Каталог для изображений.")
    transforms: List[TransformType] = Field(
        default_factory=lambda: [TransformType.NULL],
        min_length=1,
        description="Упорядоченный список преобразований.",
    )
    strategy: StrategyName = Field(StrategyName.SEQUENTIAL, description="Стратегия обхода.")
    diagnostics_enabled: bool = Field(False, description="Подробная трассировка шагов обхода.")
    parallelism: Optional[int] = Field(None, ge=1, description="Число рабочих потоков.")
    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    retry_times: int = Field(3, ge=0, description="Число повторных попыток при 5xx.")
    user_agent: str = Field("ImageScoutBot/1.0", min_length=1, description="Заголовок User-Agent.")
    reset_cache: bool = Field(
        True, description="Удалять перед запуском downloads/ и каталоги трансформаций (остальное не трогаем)."
    )

    @field_validator("root_url", mode="after")
    @classmethod
    def _normalize_root(cls, v: str) -> str:
        return normalize_url(v.strip())

    def with_overrides(self, **changes: Any) -> CrawlerConfig:
        """Возвращает копию с изменёнными полями (None игнорируется), с повторной валидацией."""
        data = self.model_dump()
        data.update({k: v for k, v in changes.items() if v is not None})
        return CrawlerConfig(**data)


DEFAULT_CONFIG = Path("configs/default.yaml")

_Parser = Callable[[str], Any]

_PARSERS: Dict[str, tuple[str, _Parser, type[Exception]]] = {
    ".yaml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".yml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".json": ("JSON", json.loads, json.JSONDecodeError),
}


def _read_mapping(path: Path) -> dict[str, Any]:
    """Разбирает файл по расширению; пустой файл даёт пустой mapping."""
    try:
        kind, parse, error = _PARSERS[path.suffix.lower()]
    except KeyError:
        raise ValueError(f"Неподдерживаемый формат конфига: {path.suffix or path.name}") from None
    try:
        data = parse(path.read_text(encoding="utf-8")) or {}
    except error as exc:
        raise ValueError(f"Неправильный {kind} в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень {kind} должен быть mapping, получено {type(data).__name__}")
    return data


def _resolve(path: Union[str, Path, None]) -> Path:
    candidate = DEFAULT_CONFIG if path is None else Path(path).expanduser().resolve()
    if not candidate.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(candidate))
    return candidate


def load_config(path: Union[str, Path, None] = None) -> CrawlerConfig:
    """
    Возвращает проверенный CrawlerConfig из YAML/JSON-файла.

    Без пути читается ``configs/default.yaml`` относительно текущего каталога.
    Отсутствующий файл: FileNotFoundError; битый файл: ValueError/TypeError;
    неверные значения: pydantic.ValidationError.
    """
    return CrawlerConfig(**_read_mapping(_resolve(path)))


__all__ = ["CrawlerConfig", "StrategyName", "DEFAULT_CONFIG", "load_config", "ValidationError"]
