"""Offline ad unit that logs impressions instead of contacting a network."""

from __future__ import annotations

import asyncio
import logging

from media_converter.application.ports import AdEventListener

logger = logging.getLogger(__name__)


class SimulatedAdClient:
    """Ad unit that loads after ``load_delay`` seconds.

    Parameters
    ----------
    unit_id : str
        Identifier reported in logs.
    load_delay : float, default=0.0
        Seconds before the loaded (or failed) event fires.
    fail_loads : int, default=0
        Number of initial load attempts that fail, to exercise backoff.
    personalized : bool, default=True
        Whether personalized ads are requested; logged only.
    """

    def __init__(
        self,
        unit_id: str,
        *,
        load_delay: float = 0.0,
        fail_loads: int = 0,
        personalized: bool = True,
    ) -> None:
        self.unit_id = unit_id
        self._load_delay = load_delay
        self._fail_loads = fail_loads
        self._personalized = personalized
        self._listener: AdEventListener | None = None
        self.impressions = 0

    def set_listener(self, listener: AdEventListener) -> None:
        self._listener = listener

    def load(self) -> None:
        loop = asyncio.get_running_loop()
        loop.call_later(self._load_delay, self._finish_load)

    async def show(self) -> None:
        self.impressions += 1
        logger.info("ad %s shown (personalized=%s)", self.unit_id, self._personalized)
        await asyncio.sleep(0)

    def _finish_load(self) -> None:
        if self._listener is None:
            return
        if self._fail_loads > 0:
            self._fail_loads -= 1
            self._listener.on_failed("no fill")
            return
        self._listener.on_loaded()
