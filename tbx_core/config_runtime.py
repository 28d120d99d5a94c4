"""
TBX Core Config Runtime - Runtime Configuration Management

This module provides runtime configuration management and path
resolution for the treebank explorer. Settings are read from an
optional JSON file and completed with per-section defaults.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import os
import copy
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Any
import threading

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TBX_CONFIG"
BASE_DIR_ENV_VAR = "TBX_BASE_DIR"

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "corpus": {
        "splits": {
            "train": "data/qpm_philotis-ud-train.conllu",
            "dev": "data/qpm_philotis-ud-dev.conllu",
            "test": "data/qpm_philotis-ud-test.conllu",
        },
        "progress_interval": 500,
        "fetch_timeout": 60,
        "encoding": "utf-8",
    },
    "search": {
        "page_size": 20,
        "len_min": 1,
        "len_max": 9999,
    },
    "ngrams": {
        "n": 2,
        "top": 30,
    },
    "collocations": {
        "window": 2,
        "top": 30,
        "measure": "pmi",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8000,
    },
}


class PathResolver:
    """Resolves platform paths"""

    def __init__(self, base_dir: Optional[Path] = None):
        self._base_dir = Path(base_dir) if base_dir else self._detect_base_dir()

    def _detect_base_dir(self) -> Path:
        """Detect the base directory"""
        env_base = os.environ.get(BASE_DIR_ENV_VAR)
        if env_base:
            return Path(env_base)

        return Path.cwd()

    @property
    def base_dir(self) -> Path:
        """Get base directory"""
        return self._base_dir

    @property
    def data_dir(self) -> Path:
        """Get data directory"""
        return self._base_dir / "data"

    @property
    def config_dir(self) -> Path:
        """Get config directory"""
        return self._base_dir / "config"

    @property
    def logs_dir(self) -> Path:
        """Get logs directory"""
        return self._base_dir / "logs"

    def resolve(self, relative_path: str) -> Path:
        """Resolve a path relative to the base directory"""
        path = Path(relative_path)
        if path.is_absolute():
            return path
        return self._base_dir / path

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary"""
        return {
            "base_dir": str(self.base_dir),
            "data_dir": str(self.data_dir),
            "config_dir": str(self.config_dir),
            "logs_dir": str(self.logs_dir),
        }


class RuntimeConfig:
    """Main runtime configuration class"""

    _instance: Optional["RuntimeConfig"] = None
    _lock = threading.Lock()

    def __new__(cls, *args, **kwargs):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self, base_dir: Optional[Path] = None, config_file: Optional[Path] = None):
        if self._initialized:
            return

        self.path_resolver = PathResolver(base_dir)
        self._config_file = self._find_config_file(config_file)
        self._settings: Dict[str, Any] = {}

        self._load_settings()

        self._initialized = True
        logger.debug(f"RuntimeConfig initialized: base_dir={self.path_resolver.base_dir}")

    @classmethod
    def reset(cls):
        """Drop the singleton so the next access re-reads settings"""
        with cls._lock:
            cls._instance = None

    def _find_config_file(self, config_file: Optional[Path]) -> Path:
        """Locate the settings file"""
        if config_file:
            return Path(config_file)

        env_file = os.environ.get(CONFIG_ENV_VAR)
        if env_file:
            return Path(env_file)

        return self.path_resolver.config_dir / "settings.json"

    def _load_settings(self):
        """Load settings from config file"""
        if self._config_file.exists():
            try:
                with open(self._config_file, "r", encoding="utf-8") as f:
                    self._settings = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load settings from {self._config_file}: {e}")
                self._settings = {}

        for section, defaults in DEFAULT_SETTINGS.items():
            values = self._settings.setdefault(section, {})
            for key, value in defaults.items():
                values.setdefault(key, copy.deepcopy(value))

    def save_settings(self):
        """Save settings to config file"""
        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")

    @property
    def config_file(self) -> Path:
        """Path of the settings file"""
        return self._config_file

    def get_setting(self, section: str, key: str, default: Any = None) -> Any:
        """Get a setting value"""
        return self._settings.get(section, {}).get(key, default)

    def set_setting(self, section: str, key: str, value: Any):
        """Set a setting value"""
        if section not in self._settings:
            self._settings[section] = {}
        self._settings[section][key] = value

    def get_split_sources(self) -> Dict[str, str]:
        """Split name to source mapping, with local paths resolved"""
        sources = {}
        for name, source in self.get_setting("corpus", "splits", {}).items():
            if "://" in source:
                sources[name] = source
            else:
                sources[name] = str(self.path_resolver.resolve(source))
        return sources

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "config_file": str(self._config_file),
            "paths": self.path_resolver.to_dict(),
            "settings": self._settings,
        }


def get_runtime_config() -> RuntimeConfig:
    """Get the singleton runtime configuration instance"""
    return RuntimeConfig()


def get_setting(section: str, key: str, default: Any = None) -> Any:
    """Get a setting value"""
    return get_runtime_config().get_setting(section, key, default)
