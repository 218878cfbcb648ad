#!/usr/bin/env python3
"""Simple complexity guard for the workflow coordinator."""

from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TARGET = ROOT / "src/media_converter/application/coordinator.py"
MAX_STATEMENTS = 40


def main() -> None:
    """Fail when coordinator methods exceed the statement threshold."""
    tree = ast.parse(TARGET.read_text(encoding="utf-8"))
    violations: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            stmt_count = sum(1 for child in ast.walk(node) if isinstance(child, ast.stmt)) - 1
            if stmt_count > MAX_STATEMENTS:
                violations.append(f"{node.name}: {stmt_count} statements")
    if violations:
        raise SystemExit(
            "Coordinator complexity threshold exceeded:\n"
            + "\n".join(f"- {v}" for v in violations)
        )
    print("Coordinator complexity check passed.")


if __name__ == "__main__":
    main()
