"""Shared enums and type aliases for the conversion workflow."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Literal, TypeAlias


class TargetFormat(str, Enum):
    """Encodings the transcoder can produce."""

    JPEG = "JPEG"
    PNG = "PNG"
    WEBP = "WEBP"


class ConversionStage(IntEnum):
    """Progress milestones of a single conversion run.

    The integer value is the progress percentage reported at that stage.
    """

    IDLE = 0
    ACCEPTED = 10
    DISPATCHED = 30
    TRANSCODED = 70
    PERSISTED = 100


class AdState(str, Enum):
    """Lifecycle state of an ad unit."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class PermissionState(str, Enum):
    """Gallery write permission as reported by the platform."""

    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


AdPlacement: TypeAlias = Literal["before", "after", "none"]
EventKind: TypeAlias = Literal[
    "source_selected",
    "selection_cancelled",
    "progress",
    "converted",
    "conversion_failed",
    "saved",
    "save_failed",
]
