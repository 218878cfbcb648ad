"""Exception hierarchy for the media conversion workflow."""

from __future__ import annotations

from media_converter.types import ConversionStage


class MediaConverterError(Exception):
    """Base class for all package errors."""

    exit_code = 1


class ConfigError(MediaConverterError):
    """Raised when settings fail validation."""

    exit_code = 2


class WorkflowError(MediaConverterError):
    """Failure surfaced to the user as a single message."""


class SelectionError(WorkflowError):
    """The picker failed for a reason other than user cancellation."""


class ConversionError(WorkflowError):
    """Conversion-path failure.

    Parameters
    ----------
    message : str
        User-facing description of the failure.
    stage : ConversionStage | None, default=None
        Last stage the run reached before failing, if it was accepted at all.
    """

    exit_code = 3

    def __init__(self, message: str, stage: ConversionStage | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class NoSourceSelectedError(ConversionError):
    """Conversion requested without a selected source."""

    def __init__(self) -> None:
        super().__init__("Select a file first.")


class UnsupportedMediaKindError(ConversionError):
    """The selected source is not an image."""

    def __init__(self, media_kind: str) -> None:
        super().__init__(f"Unsupported file type: {media_kind or 'unknown'}.")
        self.media_kind = media_kind


class UnsupportedFormatError(ConversionError):
    """Requested target format has no transcoder token."""

    def __init__(self, requested: str, stage: ConversionStage | None = None) -> None:
        super().__init__(f"Format {requested} is not supported.", stage=stage)
        self.requested = requested


class AlreadyInFlightError(ConversionError):
    """A conversion run is already active."""

    def __init__(self) -> None:
        super().__init__("A conversion is already in progress.")


class TranscodeError(ConversionError):
    """The external transcoder failed."""


class PersistenceError(WorkflowError):
    """Writing a converted artifact to storage or gallery failed."""

    exit_code = 4

    def __init__(self, message: str, stage: ConversionStage | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class NothingToSaveError(PersistenceError):
    """Save requested before any conversion succeeded."""

    def __init__(self) -> None:
        super().__init__("There is no converted file to save.")


class PermissionDeniedError(PersistenceError):
    """Gallery write permission was refused."""

    def __init__(self) -> None:
        super().__init__("Permission to write to the gallery was denied.")


class AdFailure(MediaConverterError):
    """Ad load or display failure; absorbed by the ad subsystem."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
