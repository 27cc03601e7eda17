# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Allow ``python -m shellqa``."""

from __future__ import annotations

from shellqa.cli.app import app


def main() -> None:
    app(prog_name="shellqa")


if __name__ == "__main__":
    main()
