# === FILE: polite_crawl/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера PoliteCrawl.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Literal, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
)


class CrawlerConfig(BaseModel):
    """Конфигурация для одной сессии обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Корневой URL сайта (seed).")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    max_pages: int = Field(1000, ge=1, description="Жесткий лимит по числу страниц.")
    timeout: float = Field(10.0, gt=0, description="Таймаут на один статический запрос (секунд).")
    render_timeout: float = Field(30.0, gt=0, description="Таймаут на один рендер в браузере (секунд).")
    user_agent: str = Field("PoliteCrawl/1.0", min_length=1, description="Заголовок User-Agent.")
    robots_agent: str = Field("PoliteCrawl", min_length=1, description="Имя агента для правил robots.txt.")
    rate_limit: float = Field(10.0, gt=0, description="Лимит запросов в секунду.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx/429.")
    concurrency: int = Field(4, ge=1, description="Число параллельных воркеров.")

    strategy: Literal["static", "rendered"] = Field(
        "static", description="Стратегия загрузки страниц по умолчанию."
    )
    rendered_paths: List[str] = Field(
        default_factory=list, description="Префиксы путей, которые рендерятся в браузере."
    )
    same_site_only: bool = Field(True, description="Ходить только по ссылкам seed-сайтов.")
    resolve_relative: bool = Field(False, description="Разрешать относительные ссылки.")

    precedence: Literal["last_match", "longest_match"] = Field(
        "last_match", description="Порядок применения правил robots.txt."
    )
    agent_policy: Literal["union", "agent_first"] = Field(
        "union", description="Как совмещать правила своего агента и '*'."
    )

    @field_validator("base_url", mode="before")
    def _ensure_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.endswith("/"):
            return v + "/"
        return v

    @property
    def seed(self) -> str:
        return str(self.base_url)


_DEFAULT_CFG = Path("configs/default.yaml")


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


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlerConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
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

    return CrawlerConfig(**data)
