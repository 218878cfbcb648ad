"""Interstitial ad lifecycle: preload, show-if-ready, reload and backoff."""

from __future__ import annotations

import asyncio
import logging

from media_converter.application.options import AdOptions
from media_converter.application.ports import AdClient, Scheduler, TimerHandle
from media_converter.errors import AdFailure
from media_converter.types import AdState

logger = logging.getLogger(__name__)


class _UnitListener:
    """Forwards ad unit callbacks to the owning manager."""

    def __init__(self, manager: InterstitialAdManager) -> None:
        self._manager = manager

    def on_loaded(self) -> None:
        self._manager._handle_loaded()

    def on_failed(self, reason: str) -> None:
        self._manager._handle_failed(reason)

    def on_closed(self) -> None:
        self._manager._handle_closed()


class InterstitialAdManager:
    """Finite-state owner of a single interstitial ad unit.

    ``UNLOADED -> LOADING`` on :meth:`load`, ``LOADING -> READY | FAILED`` on
    the unit's events, ``READY -> LOADING`` once a displayed ad is dismissed,
    and ``FAILED -> LOADING`` when the backoff timer fires. Failures never
    leave this class; they are logged and kept in :attr:`last_failure`.

    Parameters
    ----------
    client : AdClient
        The ad unit. Its listener is installed once, here.
    options : AdOptions, optional
        Retry delay and unit configuration.
    scheduler : Scheduler | None, default=None
        Timer source for retries; the running event loop when omitted.
    """

    def __init__(
        self,
        client: AdClient,
        options: AdOptions = AdOptions(),
        scheduler: Scheduler | None = None,
    ) -> None:
        self._client = client
        self._options = options
        self._scheduler = scheduler
        self._state = AdState.UNLOADED
        self._loaded = False
        self._loading = False
        self._showing = False
        self._show_seq = 0
        self._show_task: asyncio.Task[None] | None = None
        self._retry: TimerHandle | None = None
        self._closed = False
        self.last_failure: AdFailure | None = None
        client.set_listener(_UnitListener(self))

    @property
    def state(self) -> AdState:
        return self._state

    @property
    def is_showing(self) -> bool:
        return self._showing

    @property
    def retry_pending(self) -> bool:
        return self._retry is not None

    def load(self) -> bool:
        """Request a new ad unless one is loaded, loading or on screen.

        Returns
        -------
        bool
            ``True`` if a load call was issued.
        """
        if self._closed or self._loading or self._loaded or self._showing:
            return False
        self._cancel_retry()
        self._loading = True
        self._state = AdState.LOADING
        logger.debug("loading interstitial %s", self._options.interstitial_unit_id)
        try:
            self._client.load()
        except Exception as exc:
            self._handle_failed(f"load call raised: {exc}")
        return True

    def show_if_ready(self) -> bool:
        """Display the ad if one is ready, without waiting for it.

        When nothing is ready this only kicks off a load (from ``UNLOADED``
        or ``FAILED``) and returns ``False``.
        """
        if self._closed:
            return False
        if self._state is AdState.READY and self._loaded and not self._showing:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.warning("no running event loop; interstitial not shown")
                return False
            self._loaded = False
            self._showing = True
            self._show_seq += 1
            self._show_task = loop.create_task(self._show(self._show_seq))
            return True
        if self._state in (AdState.UNLOADED, AdState.FAILED):
            self.load()
        return False

    async def close(self) -> None:
        """Cancel the retry timer and any ad still on screen."""
        self._closed = True
        self._cancel_retry()
        task, self._show_task = self._show_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _show(self, seq: int) -> None:
        try:
            await self._client.show()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if seq == self._show_seq and self._showing:
                self._showing = False
                self._fail(f"show failed: {exc}")
            return
        if seq == self._show_seq:
            self._handle_closed()

    def _handle_loaded(self) -> None:
        if not self._loading:
            logger.debug("ignoring loaded event in state %s", self._state.value)
            return
        self._loading = False
        self._loaded = True
        self._state = AdState.READY
        logger.info("interstitial ready")

    def _handle_failed(self, reason: str) -> None:
        if not self._loading:
            logger.debug("ignoring failed event in state %s: %s", self._state.value, reason)
            return
        self._loading = False
        self._loaded = False
        self._fail(reason)

    def _handle_closed(self) -> None:
        if not self._showing:
            logger.debug("ignoring closed event in state %s", self._state.value)
            return
        self._showing = False
        logger.info("interstitial dismissed; preloading the next one")
        self.load()

    def _fail(self, reason: str) -> None:
        self.last_failure = AdFailure(reason)
        self._state = AdState.FAILED
        logger.warning(
            "interstitial failed (%s); retrying in %.1fs",
            reason,
            self._options.retry_delay,
        )
        self._schedule_retry()

    def _schedule_retry(self) -> None:
        self._cancel_retry()
        if self._closed:
            return
        scheduler = self._scheduler
        if scheduler is None:
            try:
                scheduler = asyncio.get_running_loop()
            except RuntimeError:
                logger.warning("no running event loop; interstitial retry not scheduled")
                return
        self._retry = scheduler.call_later(self._options.retry_delay, self._retry_load)

    def _retry_load(self) -> None:
        self._retry = None
        self.load()

    def _cancel_retry(self) -> None:
        retry, self._retry = self._retry, None
        if retry is not None:
            retry.cancel()
