"""Runtime settings loaded from ``MEDIA_CONVERTER_*`` environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from media_converter.application.options import (
    DEFAULT_AD_RETRY_DELAY,
    DEFAULT_ALBUM_NAME,
    DEFAULT_QUALITY,
    AdOptions,
    ConversionOptions,
    PersistOptions,
    WorkflowOptions,
)
from media_converter.errors import ConfigError
from media_converter.types import PermissionState

ENV_PREFIX = "MEDIA_CONVERTER_"


class WorkflowSettings(BaseModel):
    """Validated application settings."""

    model_config = ConfigDict(extra="forbid")

    storage_root: Path = Field(default_factory=lambda: Path.home() / ".media-converter" / "documents")
    gallery_root: Path = Field(default_factory=lambda: Path.home() / ".media-converter" / "gallery")
    album_name: str = DEFAULT_ALBUM_NAME
    quality: float = Field(default=DEFAULT_QUALITY, gt=0.0, le=1.0)
    ad_placement: Literal["before", "after", "none"] = "before"
    ad_retry_delay: float = Field(default=DEFAULT_AD_RETRY_DELAY, ge=0.0)
    interstitial_unit_id: str = "local-interstitial"
    banner_unit_id: str = "local-banner"
    personalized_ads: bool = True
    permission: PermissionState = PermissionState.UNKNOWN
    grant_on_request: bool = True

    @field_validator("album_name")
    @classmethod
    def _validate_album_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("album_name cannot be empty.")
        return value.strip()

    def to_options(self) -> WorkflowOptions:
        """Project settings onto the coordinator option objects."""
        return WorkflowOptions(
            conversion=ConversionOptions(
                quality=self.quality,
                ad_placement=self.ad_placement,
            ),
            persist=PersistOptions(album_name=self.album_name),
            ads=AdOptions(
                interstitial_unit_id=self.interstitial_unit_id,
                banner_unit_id=self.banner_unit_id,
                retry_delay=self.ad_retry_delay,
                personalized=self.personalized_ads,
            ),
        )


def load_settings(
    environ: Mapping[str, str] | None = None,
    **overrides: object,
) -> WorkflowSettings:
    """Build settings from environment variables plus explicit overrides.

    Parameters
    ----------
    environ : Mapping[str, str] | None, default=None
        Environment to read; defaults to ``os.environ``.
    **overrides : object
        Values taking precedence over the environment. ``None`` values are
        ignored so CLI options can be forwarded as-is.

    Raises
    ------
    ConfigError
        If any value fails validation.
    """
    env = os.environ if environ is None else environ
    raw: dict[str, object] = {}
    for name in WorkflowSettings.model_fields:
        value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value.strip():
            raw[name] = value.strip()
    raw.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return WorkflowSettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
