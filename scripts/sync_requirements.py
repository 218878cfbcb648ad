#!/usr/bin/env python3
"""Render requirements.txt from pyproject.toml, or check that it is current.

Usage:

    python scripts/sync_requirements.py          # rewrite requirements.txt
    python scripts/sync_requirements.py --check  # fail when it has drifted
"""

from __future__ import annotations

import argparse
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
# Extras installed alongside the base dependencies by the CLI distribution.
SYNC_EXTRAS = ("cli", "heif")


def declared_requirements(root: Path = ROOT) -> list[str]:
    """Base dependencies plus ``SYNC_EXTRAS``, sorted and de-duplicated."""
    project = tomllib.loads((root / "pyproject.toml").read_text(encoding="utf-8"))["project"]
    extras = project.get("optional-dependencies", {})
    deps = {dep.strip() for dep in project.get("dependencies", [])}
    for extra in SYNC_EXTRAS:
        deps.update(dep.strip() for dep in extras.get(extra, []))
    return sorted(dep for dep in deps if dep)


def render(root: Path = ROOT) -> str:
    header = (
        f"# Generated from pyproject.toml (base + extras: {','.join(SYNC_EXTRAS)})\n"
        "# Do not edit manually; run: python scripts/sync_requirements.py\n\n"
    )
    return header + "\n".join(declared_requirements(root)) + "\n"


def listed_requirements(root: Path = ROOT) -> list[str]:
    lines = (root / "requirements.txt").read_text(encoding="utf-8").splitlines()
    entries = (line.split("#", 1)[0].strip() for line in lines)
    return sorted(entry for entry in entries if entry)


def drift(root: Path = ROOT) -> tuple[list[str], list[str]]:
    """Return ``(missing, unexpected)`` entries of requirements.txt."""
    declared = set(declared_requirements(root))
    listed = set(listed_requirements(root))
    return sorted(declared - listed), sorted(listed - declared)


def main(argv: list[str] | None = None, root: Path = ROOT) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--check", action="store_true", help="Only verify requirements.txt.")
    args = parser.parse_args(argv)

    if not args.check:
        (root / "requirements.txt").write_text(render(root), encoding="utf-8")
        print(f"Wrote {len(declared_requirements(root))} requirements to requirements.txt")
        return

    missing, unexpected = drift(root)
    if missing or unexpected:
        lines = ["requirements.txt is out of sync with pyproject.toml."]
        lines += [f"- missing: {entry}" for entry in missing]
        lines += [f"- unexpected: {entry}" for entry in unexpected]
        lines.append("Run: python scripts/sync_requirements.py")
        raise SystemExit("\n".join(lines))
    print("requirements.txt is in sync.")


if __name__ == "__main__":
    main()
