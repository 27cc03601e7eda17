# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import logging
import stat
import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from shellqa.runtime.console.manager import get_console_manager

# Stand-ins for the real binaries. Both understand ``--version`` and read the
# script from stdin when the last argument is ``-``. A ``SLEEP`` line makes
# them stall so timeouts and cancellation can be observed.
FAKE_SHFMT = textwrap.dedent(
    '''
    import sys, time

    args = sys.argv[1:]
    if "--version" in args:
        print("v3.8.0")
        sys.exit(0)
    source = sys.stdin.read()
    if "SLEEP" in source:
        print("partial", flush=True)
        time.sleep(10)
    for number, line in enumerate(source.splitlines(), start=1):
        if "BROKEN" in line:
            sys.stderr.write(f"<standard input>:{number}:3: reached EOF without closing quote\\n")
            sys.exit(1)
    formatted = "".join(line.strip() + "\\n" for line in source.splitlines())
    if "-d" in args:
        if formatted != source:
            print("--- a/-\\n+++ b/-\\n@@ -2,3 +2,3 @@\\n-  x\\n+x")
            sys.exit(1)
        sys.exit(0)
    sys.stdout.write(formatted)
    '''
)

FAKE_SHELLCHECK = textwrap.dedent(
    '''
    import sys, time

    args = sys.argv[1:]
    if "--version" in args:
        print("ShellCheck - shell script analysis tool\\nversion: 0.10.0")
        sys.exit(0)
    target = args[-1]
    source = sys.stdin.read() if target == "-" else open(target, encoding="utf-8").read()
    if "SLEEP" in source:
        time.sleep(10)
    excluded = ""
    for arg in args:
        if arg.startswith("--exclude="):
            excluded = arg.split("=", 1)[1]
    findings = 0
    for number, line in enumerate(source.splitlines(), start=1):
        if "unused=" in line and "SC2034" not in excluded:
            column = line.index("unused=") + 1
            print(f"{target}:{number}:{column}: warning: unused appears unused. [SC2034]")
            findings += 1
        if "ERROR" in line:
            print(f"{target}:{number}:1: error: Couldn't parse this. [SC1073]")
            findings += 1
    sys.exit(1 if findings else 0)
    '''
)


@pytest.fixture(autouse=True)
def _isolate_console_and_logging() -> Iterator[None]:
    """Forget cached consoles and package log handlers between tests."""

    get_console_manager().reset()
    yield
    get_console_manager().reset()
    logger = logging.getLogger("shellqa")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    if hasattr(logger, "_shellqa_configured"):
        delattr(logger, "_shellqa_configured")
    logger.propagate = True


@pytest.fixture
def make_executable(tmp_path: Path) -> Callable[[str, str], str]:
    """Return a factory writing a Python program wrapped in an executable shell script."""

    def _make(name: str, body: str) -> str:
        program = tmp_path / f"{name}.py"
        program.write_text(body, encoding="utf-8")
        wrapper = tmp_path / name
        wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{program}" "$@"\n', encoding="utf-8")
        wrapper.chmod(wrapper.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(wrapper)

    return _make


@pytest.fixture
def fake_shfmt(make_executable: Callable[[str, str], str]) -> str:
    return make_executable("shfmt", FAKE_SHFMT)


@pytest.fixture
def fake_shellcheck(make_executable: Callable[[str, str], str]) -> str:
    return make_executable("shellcheck", FAKE_SHELLCHECK)


@pytest.fixture
def missing_tool(tmp_path: Path) -> str:
    return str(tmp_path / "does-not-exist")
