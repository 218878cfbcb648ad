#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/media_converter"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    for path in (PACKAGE / "application").glob("*.py"):
        _assert_no_imports(
            path,
            [
                "import typer",
                "from typer",
                "from PIL",
                "media_converter.adapters",
                "media_converter.cli",
            ],
        )

    # The ad subsystem must never reach into conversion state.
    for path in (PACKAGE / "ads").glob("*.py"):
        _assert_no_imports(
            path,
            [
                "media_converter.application.coordinator",
                "media_converter.application.state",
                "media_converter.adapters",
            ],
        )

    _assert_no_imports(PACKAGE / "cli/cli.py", ["from PIL import Image"])

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
