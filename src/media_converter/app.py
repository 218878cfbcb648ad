"""Wiring of the coordinator with the local desktop adapters."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from media_converter.adapters.ads import SimulatedAdClient
from media_converter.adapters.gallery import DirectoryGallery
from media_converter.adapters.permissions import StaticPermissionProvider
from media_converter.adapters.picker import PathPicker
from media_converter.adapters.storage import LocalFileStore
from media_converter.adapters.transcoder import PillowTranscoder
from media_converter.ads.banner import BannerAdSlot
from media_converter.ads.interstitial import InterstitialAdManager
from media_converter.application.coordinator import WorkflowCoordinator
from media_converter.application.permissions import PermissionGate
from media_converter.config import WorkflowSettings


@dataclass(frozen=True)
class LocalWorkflow:
    """Coordinator plus the surfaces living next to it."""

    coordinator: WorkflowCoordinator
    interstitial: InterstitialAdManager
    banner: BannerAdSlot


def build_local_workflow(
    settings: WorkflowSettings,
    source_path: Path | None,
    *,
    ad_load_delay: float = 0.0,
) -> LocalWorkflow:
    """Assemble a workflow that reads ``source_path`` and writes under the
    configured storage and gallery roots."""
    options = settings.to_options()
    interstitial = InterstitialAdManager(
        SimulatedAdClient(
            options.ads.interstitial_unit_id,
            load_delay=ad_load_delay,
            personalized=options.ads.personalized,
        ),
        options.ads,
    )
    banner = BannerAdSlot(
        SimulatedAdClient(options.ads.banner_unit_id, personalized=options.ads.personalized),
        options.ads.banner_unit_id,
    )
    coordinator = WorkflowCoordinator(
        picker=PathPicker(source_path),
        transcoder=PillowTranscoder(),
        file_store=LocalFileStore(settings.storage_root),
        gallery=DirectoryGallery(settings.gallery_root),
        permissions=PermissionGate(
            StaticPermissionProvider(settings.permission, settings.grant_on_request)
        ),
        ads=interstitial,
        options=options,
    )
    return LocalWorkflow(coordinator=coordinator, interstitial=interstitial, banner=banner)
