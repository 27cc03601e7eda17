# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for entry-point plugin discovery and plugin construction."""

from __future__ import annotations

from importlib import metadata
from importlib.metadata import EntryPoint

import pytest

from shellqa.config import Config
from shellqa.plugins import PLUGIN_GROUP, ShellcheckPlugin, ShfmtPlugin, build_plugins, load_plugin_factories
from shellqa.plugins.initializer import build_shfmt_plugin


class _FakeEntryPoint:
    def __init__(self, name: str, target: object) -> None:
        self.name = name
        self._target = target

    def load(self) -> object:
        if isinstance(self._target, Exception):
            raise self._target
        return self._target


def test_load_plugin_factories_skips_broken_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    def factory(config: Config) -> None:
        return None

    entries = {
        PLUGIN_GROUP: [_FakeEntryPoint("good", factory), _FakeEntryPoint("bad", ImportError("missing module"))],
        "other.group": [_FakeEntryPoint("ignored", factory)],
    }
    monkeypatch.setattr(metadata, "entry_points", lambda: entries)

    assert load_plugin_factories() == (factory,)


def test_entry_point_objects_are_supported(monkeypatch: pytest.MonkeyPatch) -> None:
    entry = EntryPoint(name="demo", value="shellqa.plugins.initializer:build_shfmt_plugin", group=PLUGIN_GROUP)
    monkeypatch.setattr(metadata, "entry_points", lambda: metadata.EntryPoints([entry]))

    assert load_plugin_factories() == (build_shfmt_plugin,)


def test_build_plugins_respects_enablement_and_factories() -> None:
    config = Config.from_mapping({"shfmt": {"enabled": False}, "editor_tab_size": 2})
    extra = build_shfmt_plugin(config)

    def good(config: Config) -> ShfmtPlugin:
        return extra

    def opt_out(config: Config) -> None:
        return None

    def broken(config: Config) -> None:
        raise RuntimeError("factory failure")

    plugins = build_plugins(config, factory_loader=lambda: (good, opt_out, broken))

    assert isinstance(plugins[0], ShellcheckPlugin)
    assert plugins[1] is extra
    assert len(plugins) == 2


def test_built_in_plugins_carry_configuration() -> None:
    config = Config.from_mapping(
        {
            "shfmt": {"path": "/opt/shfmt", "case_indent": False},
            "shellcheck": {"exclude": ["2086"], "shell": "bash"},
            "diagnosis": {"timeout_ms": 1234, "on_error": "ignore"},
            "editor_tab_size": 2,
        },
    )
    shfmt, shellcheck = build_plugins(config, factory_loader=tuple)

    assert isinstance(shfmt, ShfmtPlugin) and isinstance(shellcheck, ShellcheckPlugin)
    assert shfmt.tool.command_path == "/opt/shfmt"
    assert shfmt.tool.settings.indent == 2
    assert not shfmt.tool.settings.case_indent
    assert shfmt.tool.timeout_ms == 1234
    assert not shfmt.report_execution_errors
    assert shellcheck.tool.build_args()[2:4] == ["--exclude=SC2086", "--shell=bash"]
