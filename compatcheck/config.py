"""Checker configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Optional

import yaml

from .exceptions import ConfigError
from .models import LogLevel


_LOGGING_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class CheckerConfig:
    """Global configuration for a compatibility check."""
    allow_breaking: frozenset = frozenset()
    workers: int = 1
    root_path: str = "$"
    log_level: LogLevel = LogLevel.INFO
    fail_on_violations: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'allow_breaking', frozenset(self.allow_breaking))
        if self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self.log_level]

    def with_allowed(self, identities: Iterable[str]) -> 'CheckerConfig':
        """Return a copy whose allow list also covers the given identities."""
        extra = {i.strip() for i in identities if i and i.strip()}
        return replace(self, allow_breaking=self.allow_breaking | extra)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'CheckerConfig':
        """Build a config from camelCase keys as found in a config file."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        allow = data.get('allowBreaking', [])
        if isinstance(allow, str):
            allow = [allow]
        if not isinstance(allow, list) or not all(isinstance(a, str) for a in allow):
            raise ConfigError("allowBreaking must be a list of member identities")

        workers = data.get('workers', 1)
        if not isinstance(workers, int) or isinstance(workers, bool):
            raise ConfigError(f"workers must be an integer, got {workers!r}")

        root_path = data.get('rootPath', '$')
        if not isinstance(root_path, str):
            raise ConfigError("rootPath must be a JSONPath string")

        level_name = str(data.get('logLevel', 'INFO')).upper()
        if level_name == 'WARNING':
            level_name = 'WARN'
        try:
            log_level = LogLevel(level_name)
        except ValueError:
            raise ConfigError(f"Unknown logLevel: {data.get('logLevel')}")

        fail_on_violations = data.get('failOnViolations', True)
        if not isinstance(fail_on_violations, bool):
            raise ConfigError("failOnViolations must be a boolean")

        return cls(
            allow_breaking=frozenset(allow),
            workers=workers,
            root_path=root_path,
            log_level=log_level,
            fail_on_violations=fail_on_violations,
        )

    @classmethod
    def from_file(cls, path: str | Path) -> 'CheckerConfig':
        """Load configuration from a YAML or JSON file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}")

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}")

        return cls.from_dict(data)
