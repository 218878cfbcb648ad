"""Format mapping and output naming for the transcoder call."""

from __future__ import annotations

import time
from collections.abc import Callable

from media_converter.errors import UnsupportedFormatError
from media_converter.types import ConversionStage, TargetFormat

FORMAT_TOKENS: dict[str, TargetFormat] = {
    "JPEG": TargetFormat.JPEG,
    "JPG": TargetFormat.JPEG,
    "PNG": TargetFormat.PNG,
    "WEBP": TargetFormat.WEBP,
}

OUTPUT_PREFIX = "converted_"


def available_formats() -> tuple[str, ...]:
    """Format names accepted by :meth:`ConversionPipeline.resolve_format`."""
    return tuple(FORMAT_TOKENS)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ConversionPipeline:
    """Thin adapter between requested format names and the transcoder.

    Parameters
    ----------
    quality : float
        Compression quality in ``(0, 1]`` passed to every transcode call.
    clock : Callable[[], int], optional
        Returns the current Unix time in milliseconds.
    """

    def __init__(self, quality: float, clock: Callable[[], int] = _now_ms) -> None:
        if not 0.0 < quality <= 1.0:
            raise ValueError("quality must be in (0, 1].")
        self.quality = quality
        self._clock = clock
        self._last_stamp = -1

    @staticmethod
    def normalize(requested: str) -> str:
        return requested.strip().upper()

    def resolve_format(
        self,
        requested: str,
        stage: ConversionStage | None = None,
    ) -> TargetFormat:
        """Map a requested name to the transcoder format.

        Raises
        ------
        UnsupportedFormatError
            If the name is outside ``JPEG``, ``JPG``, ``PNG``, ``WEBP``.
        """
        token = FORMAT_TOKENS.get(self.normalize(requested))
        if token is None:
            raise UnsupportedFormatError(requested, stage=stage)
        return token

    def output_name(self, requested: str) -> str:
        """Return ``converted_<unixMillis>.<ext>`` for the requested name.

        The stamp is bumped when the clock repeats so names never collide
        within this process.
        """
        stamp = max(self._clock(), self._last_stamp + 1)
        self._last_stamp = stamp
        return f"{OUTPUT_PREFIX}{stamp}.{self.normalize(requested).lower()}"

    @staticmethod
    def join(root: str, name: str) -> str:
        if not root or root.endswith("/"):
            return f"{root}{name}"
        return f"{root}/{name}"
