"""
Convenience script to run the full test suite.

Usage (from project root):

    python tests.py

Behaviour:
- Installs the package with its test extra (``.[dev]``) when pytest, numpy
  or the package itself cannot be imported.
- Runs `python -m pytest` in the project root.
"""
from __future__ import annotations

import importlib.util
import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parent

REQUIRED_MODULES = ("pytest", "numpy", "doppelkopf")


def ensure_test_dependencies() -> None:
    missing = [name for name in REQUIRED_MODULES if importlib.util.find_spec(name) is None]
    if not missing:
        return

    print(f"Installing test dependencies (.[dev]), missing: {', '.join(missing)} ...")
    subprocess.check_call(
        [sys.executable, "-m", "pip", "install", "-e", ".[dev]"],
        cwd=str(ROOT),
    )


def main() -> None:
    ensure_test_dependencies()
    print("Running test suite with pytest ...")
    subprocess.check_call(
        [sys.executable, "-m", "pytest"],
        cwd=str(ROOT),
    )


if __name__ == "__main__":
    main()
