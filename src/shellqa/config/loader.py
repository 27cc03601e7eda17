# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Layered configuration sources (defaults, pyproject, standalone TOML)."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from .models import Config, ConfigError

LOGGER = logging.getLogger(__name__)

PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "shellqa"
PROJECT_CONFIG_NAME: Final[str] = ".shellqa.toml"


class ConfigSource(Protocol):
    """Produce one configuration fragment."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return the fragment contributed by this source."""

    def describe(self) -> str:
        """Return a human readable description of the source."""


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return Config().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a standalone TOML document."""

    def __init__(self, path: Path, *, name: str | None = None) -> None:
        self._path = path
        self.name = name or str(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Mapping[str, Any]:
        """Return the parsed document, or an empty mapping when it is absent.

        Raises:
            ConfigError: If the file is not valid TOML.
        """

        if not self._path.is_file():
            return {}
        try:
            with self._path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {self._path}: {exc}") from exc
        LOGGER.debug("loaded configuration from %s", self._path)
        return data

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.shellqa]`` within ``pyproject.toml``."""

    def load(self) -> Mapping[str, Any]:
        data = super().load()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {self.path} must be a table")
        return dict(section)

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated recursively with ``override``."""

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


class ConfigLoader:
    """Apply layered configuration sources with predictable precedence."""

    def __init__(self, sources: Sequence[ConfigSource]) -> None:
        if not sources:
            raise ValueError("at least one configuration source is required")
        self._sources = list(sources)

    @classmethod
    def for_root(cls, project_root: Path, *, config_file: Path | None = None) -> ConfigLoader:
        """Build a loader for ``project_root``.

        Precedence, lowest first: defaults, ``[tool.shellqa]`` in
        ``pyproject.toml``, then ``.shellqa.toml`` (or ``config_file``).

        Args:
            project_root: Directory searched for configuration files.
            config_file: Explicit standalone TOML file replacing ``.shellqa.toml``.

        Returns:
            ConfigLoader: Loader with the default source ordering.

        Raises:
            ConfigError: If ``config_file`` is given but does not exist.
        """

        root = project_root.resolve()
        if config_file is not None and not config_file.is_file():
            raise ConfigError(f"Configuration file not found: {config_file}")
        sources: list[ConfigSource] = [DefaultConfigSource()]
        pyproject = root / "pyproject.toml"
        if pyproject.is_file():
            sources.append(PyProjectConfigSource(pyproject))
        sources.append(TomlConfigSource(config_file or root / PROJECT_CONFIG_NAME))
        return cls(sources)

    @property
    def sources(self) -> tuple[ConfigSource, ...]:
        return tuple(self._sources)

    def load(self) -> Config:
        """Merge every source and validate the result.

        Returns:
            Config: Effective configuration.

        Raises:
            ConfigError: If a source is malformed or the merged data is invalid.
        """

        merged: MutableMapping[str, Any] = {}
        for source in self._sources:
            fragment = source.load()
            if not isinstance(fragment, Mapping):
                raise ConfigError(f"{source.describe()} must be a table")
            merged = deep_merge(merged, fragment)
        return Config.from_mapping(merged)


def load_config(project_root: Path, *, config_file: Path | None = None) -> Config:
    """Return the effective configuration for ``project_root``."""

    return ConfigLoader.for_root(project_root, config_file=config_file).load()


__all__ = [
    "ConfigLoader",
    "ConfigSource",
    "DefaultConfigSource",
    "PROJECT_CONFIG_NAME",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "deep_merge",
    "load_config",
]
