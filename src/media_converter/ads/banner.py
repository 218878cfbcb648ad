"""Passive banner surface shown alongside the workflow."""

from __future__ import annotations

import logging

from media_converter.application.ports import AdClient
from media_converter.errors import AdFailure
from media_converter.types import AdState

logger = logging.getLogger(__name__)


class BannerAdSlot:
    """Banner unit that requests one ad when attached and never retries."""

    def __init__(self, client: AdClient, unit_id: str = "") -> None:
        self._client = client
        self.unit_id = unit_id
        self.state = AdState.UNLOADED
        self.last_failure: AdFailure | None = None
        client.set_listener(self)

    def attach(self) -> None:
        if self.state is not AdState.UNLOADED:
            return
        self.state = AdState.LOADING
        try:
            self._client.load()
        except Exception as exc:
            self.on_failed(str(exc))

    def on_loaded(self) -> None:
        if self.state is AdState.LOADING:
            self.state = AdState.READY

    def on_failed(self, reason: str) -> None:
        self.state = AdState.FAILED
        self.last_failure = AdFailure(reason)
        logger.warning("banner %s failed: %s", self.unit_id, reason)

    def on_closed(self) -> None:
        """Banners are never dismissed."""
