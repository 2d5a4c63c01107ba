"""Configuration loading helpers for the funding harvester."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import yaml

from ..errors import UnknownSource
from .models import GlobalConfig, SourceConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
GLOBAL_CONFIG_FILENAME = "global_config.yaml"
SOURCE_CONFIG_SUFFIX = ".yaml"
BUILTIN_SOURCES_DIR = Path(__file__).resolve().parent / "sources"


def _slugify(name: str) -> str:
    return "".join(ch.lower() if ch.isalnum() else "-" for ch in name).strip("-")


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    sources_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("FUNDING_HARVESTER_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.sources_dir = (self.data_dir / "sources").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.sources_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def global_config_path(self) -> Path:
        return self.data_dir / GLOBAL_CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation.

    Sources come from the built-in ``config/sources`` directory shipped with
    the package; a file with the same slug under ``data/sources`` replaces
    the built-in definition.
    """

    def __init__(
        self,
        locator: ConfigLocator | None = None,
        builtin_dir: Path | None = BUILTIN_SOURCES_DIR,
    ) -> None:
        self.locator = locator or ConfigLocator()
        self.builtin_dir = builtin_dir
        self._global_cache: GlobalConfig | None = None

    # ------------------------------------------------------------------
    # Global configuration helpers
    # ------------------------------------------------------------------
    def load_global_config(self) -> GlobalConfig:
        if self._global_cache is not None:
            return self._global_cache
        path = self.locator.global_config_path()
        if path.exists():
            global_cfg = GlobalConfig.model_validate(_read_file(path))
        else:
            global_cfg = GlobalConfig()
            self.save_global_config(global_cfg)
        self._global_cache = global_cfg
        return global_cfg

    def save_global_config(self, config: GlobalConfig) -> None:
        _write_file(self.locator.global_config_path(), config.model_dump(mode="json"))
        self._global_cache = config

    def store_path(self) -> Path:
        """Database location, relative paths anchored at the project root."""

        path = self.load_global_config().store_path
        if not path.is_absolute():
            path = self.locator.project_root / path
        return path

    # ------------------------------------------------------------------
    # Source configuration helpers
    # ------------------------------------------------------------------
    def source_path(self, source_name: str) -> Path:
        return self.locator.sources_dir / f"{_slugify(source_name)}{SOURCE_CONFIG_SUFFIX}"

    def list_source_files(self) -> Iterable[Path]:
        by_slug: dict[str, Path] = {}
        for directory in (self.builtin_dir, self.locator.sources_dir):
            if directory is None or not directory.exists():
                continue
            for path in sorted(directory.glob("*")):
                if path.is_file() and path.suffix in CONFIG_EXTENSIONS:
                    by_slug[path.stem] = path
        return list(by_slug.values())

    def list_sources(self, include_disabled: bool = False) -> list[SourceConfig]:
        sources = [self.load_source(path) for path in self.list_source_files()]
        if include_disabled:
            return sources
        return [source for source in sources if source.enabled]

    def load_source(self, identifier: str | Path) -> SourceConfig:
        if isinstance(identifier, Path):
            path = identifier
        else:
            path = self._find_source_file(identifier)
        if path is None or not path.exists():
            raise UnknownSource(str(identifier))
        return SourceConfig.model_validate(_read_file(path))

    def save_source(self, config: SourceConfig) -> Path:
        path = self.source_path(config.name)
        _write_file(path, config.model_dump(mode="json", exclude_none=True))
        return path

    def _find_source_file(self, source_name: str) -> Path | None:
        slug = _slugify(source_name)
        for path in self.list_source_files():
            if path.stem == slug:
                return path
        return None


__all__ = ["BUILTIN_SOURCES_DIR", "ConfigLocator", "ConfigRepository", "CONFIG_EXTENSIONS"]
