"""Directory-backed gallery: assets are files, albums are sub-directories."""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class DirectoryGallery:
    """Gallery stored under ``root``.

    ``create_asset`` copies the file into ``root``; ``create_album`` places the
    asset inside ``root/<album>``, moving it unless ``copy`` is set. Album
    creation is idempotent.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    async def create_asset(self, locator: str) -> str:
        source = Path(locator)
        if not source.is_file():
            raise FileNotFoundError(f"No such file: {source}")
        self._root.mkdir(parents=True, exist_ok=True)
        target = self._root / source.name
        await asyncio.to_thread(shutil.copy2, source, target)
        return str(target)

    async def create_album(self, name: str, asset: str, copy: bool) -> None:
        album = self._root / name
        album.mkdir(parents=True, exist_ok=True)
        asset_path = Path(asset)
        target = album / asset_path.name
        if copy:
            await asyncio.to_thread(shutil.copy2, asset_path, target)
        else:
            await asyncio.to_thread(shutil.move, asset_path, target)
        logger.debug("asset %s placed in album %s", asset_path.name, name)
