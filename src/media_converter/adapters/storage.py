"""Local file system store rooted at the app's document directory."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path


class LocalFileStore:
    def __init__(self, root: Path) -> None:
        self._root = root

    def permanent_root(self) -> str:
        self._root.mkdir(parents=True, exist_ok=True)
        return f"{self._root}/"

    async def move(self, source: str, destination: str) -> None:
        dest = Path(destination)
        if dest.exists():
            raise FileExistsError(f"Refusing to overwrite {dest}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(shutil.move, source, dest)

    async def remove(self, locator: str) -> None:
        await asyncio.to_thread(Path(locator).unlink, missing_ok=True)
