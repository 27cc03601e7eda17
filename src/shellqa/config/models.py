# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for shell tool integration."""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shellqa.core.runtime.process import DEFAULT_TIMEOUT_MS
from shellqa.core.severity import LinterSeverity

SHFMT_PLUGIN: Final[str] = "shfmt"
SHELLCHECK_PLUGIN: Final[str] = "shellcheck"
DEFAULT_DEBOUNCE_MS: Final[int] = 300
DEFAULT_EDITOR_TAB_SIZE: Final[int] = 4

_RULE_CODE: Final[re.Pattern[str]] = re.compile(r"^(?:SC)?(?P<number>\d{4})$", re.IGNORECASE)


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class TabSizeMode(str, Enum):
    """Symbolic indent settings for the formatter."""

    IGNORE = "ignore"
    EDITOR = "editor"


class OnErrorMode(str, Enum):
    """How tool failures are surfaced to the user."""

    SHOW_PROBLEM = "show_problem"
    IGNORE = "ignore"


class ShfmtConfig(BaseModel):
    """Formatter backend settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    path: str = "shfmt"
    tab_size: int | TabSizeMode = TabSizeMode.EDITOR
    binary_next_line: bool = True
    case_indent: bool = True
    space_redirects: bool = True

    @field_validator("tab_size")
    @classmethod
    def _non_negative_tab_size(cls, value: int | TabSizeMode) -> int | TabSizeMode:
        if isinstance(value, int) and value < 0:
            raise ValueError("tab_size must be non-negative")
        return value

    @field_validator("path")
    @classmethod
    def _non_empty_path(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("path must not be empty")
        return stripped


class ShellcheckConfig(BaseModel):
    """Linter backend settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    path: str = "shellcheck"
    exclude: tuple[str, ...] = ()
    severity: LinterSeverity | None = None
    shell: str | None = None

    @field_validator("exclude", mode="before")
    @classmethod
    def _normalise_rule_codes(cls, value: Any) -> tuple[str, ...]:
        """Accept ``SC2034``, ``sc2034`` or ``2034`` and store ``SC2034``.

        Raises:
            ValueError: If an entry is not a shellcheck rule code.
        """

        if value is None:
            return ()
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        codes: list[str] = []
        for entry in value:
            match = _RULE_CODE.match(str(entry).strip())
            if match is None:
                raise ValueError(f"invalid shellcheck rule code: {entry!r}")
            code = f"SC{match.group('number')}"
            if code not in codes:
                codes.append(code)
        return tuple(codes)

    @field_validator("path")
    @classmethod
    def _non_empty_path(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("path must not be empty")
        return stripped


class DiagnosisConfig(BaseModel):
    """Timing and reporting settings for the diagnosis pipeline."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS, ge=0)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    on_error: OnErrorMode = OnErrorMode.SHOW_PROBLEM
    diagnose_on_change: bool = True


class Config(BaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    shfmt: ShfmtConfig = Field(default_factory=ShfmtConfig)
    shellcheck: ShellcheckConfig = Field(default_factory=ShellcheckConfig)
    diagnosis: DiagnosisConfig = Field(default_factory=DiagnosisConfig)
    editor_tab_size: int = Field(default=DEFAULT_EDITOR_TAB_SIZE, ge=1)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Config:
        """Validate ``data`` into a configuration.

        Args:
            data: Raw mapping, typically merged TOML tables.

        Returns:
            Config: Validated configuration.

        Raises:
            ConfigError: If any value is invalid.
        """

        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def effective_indent(self) -> int | None:
        """Return the formatter indent width, or ``None`` to omit the flag.

        ``0`` asks the formatter to indent with tabs.
        """

        tab_size = self.shfmt.tab_size
        if tab_size is TabSizeMode.IGNORE:
            return None
        if tab_size is TabSizeMode.EDITOR:
            return self.editor_tab_size
        return tab_size

    def enabled_plugins(self) -> tuple[str, ...]:
        """Return plugin names enabled by this configuration, formatter first."""

        names: list[str] = []
        if self.shfmt.enabled:
            names.append(SHFMT_PLUGIN)
        if self.shellcheck.enabled:
            names.append(SHELLCHECK_PLUGIN)
        return tuple(names)

    def affects_plugins(self, other: Config) -> bool:
        """Return ``True`` when switching to ``other`` requires rebuilding plugins."""

        return (
            self.shfmt != other.shfmt
            or self.shellcheck != other.shellcheck
            or self.effective_indent() != other.effective_indent()
            or self.diagnosis.timeout_ms != other.diagnosis.timeout_ms
        )


__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_EDITOR_TAB_SIZE",
    "DiagnosisConfig",
    "OnErrorMode",
    "SHELLCHECK_PLUGIN",
    "SHFMT_PLUGIN",
    "ShellcheckConfig",
    "ShfmtConfig",
    "TabSizeMode",
]
