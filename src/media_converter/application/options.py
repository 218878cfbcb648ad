"""Typed option objects shared across the workflow components."""

from __future__ import annotations

from dataclasses import dataclass

from media_converter.types import AdPlacement

DEFAULT_ALBUM_NAME = "Conversões"
DEFAULT_QUALITY = 0.9
DEFAULT_AD_RETRY_DELAY = 10.0


@dataclass(frozen=True)
class ConversionOptions:
    """Transcoding configuration."""

    quality: float = DEFAULT_QUALITY
    ad_placement: AdPlacement = "before"


@dataclass(frozen=True)
class PersistOptions:
    """Gallery persistence configuration."""

    album_name: str = DEFAULT_ALBUM_NAME
    copy_to_album: bool = False


@dataclass(frozen=True)
class AdOptions:
    """Ad unit identifiers and reload policy."""

    interstitial_unit_id: str = ""
    banner_unit_id: str = ""
    retry_delay: float = DEFAULT_AD_RETRY_DELAY
    personalized: bool = True


@dataclass(frozen=True)
class WorkflowOptions:
    """Options passed to the workflow coordinator."""

    conversion: ConversionOptions = ConversionOptions()
    persist: PersistOptions = PersistOptions()
    ads: AdOptions = AdOptions()
