"""Image conversion workflow with an isolated ad-delivery subsystem."""

from __future__ import annotations

from media_converter.ads import BannerAdSlot, InterstitialAdManager
from media_converter.application.coordinator import WorkflowCoordinator
from media_converter.application.permissions import PermissionGate
from media_converter.application.pipeline import ConversionPipeline, available_formats
from media_converter.schemas import ConvertedArtifact, SourceArtifact
from media_converter.types import AdState, ConversionStage, PermissionState, TargetFormat

__version__ = "0.1.0"

__all__ = [
    "AdState",
    "BannerAdSlot",
    "ConversionPipeline",
    "ConversionStage",
    "ConvertedArtifact",
    "InterstitialAdManager",
    "PermissionGate",
    "PermissionState",
    "SourceArtifact",
    "TargetFormat",
    "WorkflowCoordinator",
    "available_formats",
]
