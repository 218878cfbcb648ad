"""Pillow-backed transcoder writing into a cache directory."""

from __future__ import annotations

import asyncio
import logging
import tempfile
import uuid
from pathlib import Path

from PIL import Image

from media_converter.types import TargetFormat

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    TargetFormat.JPEG: "jpg",
    TargetFormat.PNG: "png",
    TargetFormat.WEBP: "webp",
}


def _register_optional_openers() -> None:
    """Enable HEIC/HEIF decoding when ``pillow-heif`` is installed."""
    try:
        from pillow_heif import register_heif_opener
    except ImportError:
        return
    register_heif_opener()


class PillowTranscoder:
    """Re-encode images with Pillow.

    Parameters
    ----------
    cache_dir : Path | None, default=None
        Where intermediate outputs are written before being moved into
        permanent storage. A private temporary directory when omitted.
    """

    def __init__(self, cache_dir: Path | None = None) -> None:
        self._cache_dir = cache_dir or Path(tempfile.mkdtemp(prefix="media-converter-"))
        _register_optional_openers()

    async def transcode(self, locator: str, target_format: TargetFormat, quality: float) -> str:
        return await asyncio.to_thread(self._transcode, Path(locator), target_format, quality)

    def _transcode(self, source: Path, target_format: TargetFormat, quality: float) -> str:
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        out_path = self._cache_dir / f"{uuid.uuid4().hex}.{_EXTENSIONS[target_format]}"
        with Image.open(source) as img:
            if target_format is TargetFormat.JPEG and img.mode not in ("RGB", "L"):
                work = img.convert("RGB")
            elif img.mode not in ("RGB", "RGBA", "L", "LA"):
                work = img.convert("RGBA")
            else:
                work = img
            save_kw: dict[str, object] = {"format": target_format.value}
            if target_format is TargetFormat.PNG:
                save_kw["optimize"] = True
            else:
                save_kw["quality"] = round(quality * 100)
            work.save(out_path, **save_kw)
        logger.info("transcoded %s -> %s", source.name, out_path.name)
        return str(out_path)
