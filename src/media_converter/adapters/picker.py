"""Picker that resolves a file path given up front (CLI argument)."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from media_converter.schemas import PickedFile

# Formats commonly produced by phone cameras that ``mimetypes`` may not know.
_EXTRA_TYPES = {
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".webp": "image/webp",
    ".avif": "image/avif",
}


def guess_mime_type(path: Path) -> str | None:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or _EXTRA_TYPES.get(path.suffix.lower())


class PathPicker:
    """Returns ``path`` as the picked file; ``None`` path means cancelled."""

    def __init__(self, path: Path | None) -> None:
        self._path = path

    async def pick_image(self) -> PickedFile | None:
        if self._path is None:
            return None
        path = self._path.expanduser().resolve()
        if not path.is_file():
            raise FileNotFoundError(f"No such file: {path}")
        return PickedFile(
            uri=str(path),
            name=path.name,
            mime_type=guess_mime_type(path),
            size=path.stat().st_size,
        )
