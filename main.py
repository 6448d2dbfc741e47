#!/usr/bin/env python3
"""Runs the scanner CLI straight from a source checkout."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path


SRC_PATH = Path(__file__).resolve().parent / "src"
if SRC_PATH.is_dir() and str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


def main() -> None:
    importlib.import_module("deadlink_scanner.cli").main()


if __name__ == "__main__":
    main()
