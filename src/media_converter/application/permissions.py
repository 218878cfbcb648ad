"""Gallery write permission gate."""

from __future__ import annotations

import asyncio
import logging

from media_converter.application.ports import PermissionProvider
from media_converter.errors import PermissionDeniedError
from media_converter.types import PermissionState

logger = logging.getLogger(__name__)


class PermissionGate:
    """Cache of the process-wide permission state, refreshed lazily."""

    def __init__(self, provider: PermissionProvider) -> None:
        self._provider = provider
        self._state = PermissionState.UNKNOWN
        self._pending: asyncio.Future[PermissionState] | None = None

    @property
    def state(self) -> PermissionState:
        return self._state

    async def refresh(self) -> PermissionState:
        """Re-read the status from the provider without prompting."""
        self._state = await self._provider.get_status()
        return self._state

    async def resolve(self) -> PermissionState:
        """Return the current state, prompting the user when undetermined.

        Concurrent callers share a single prompt.
        """
        if self._state is not PermissionState.GRANTED:
            await self.refresh()
        if self._state is not PermissionState.UNKNOWN:
            return self._state
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._request())
        try:
            return await asyncio.shield(self._pending)
        finally:
            if self._pending is not None and self._pending.done():
                self._pending = None

    async def ensure_granted(self) -> None:
        """Raise :class:`PermissionDeniedError` unless permission is granted."""
        state = await self.resolve()
        if state is not PermissionState.GRANTED:
            raise PermissionDeniedError()

    async def _request(self) -> PermissionState:
        logger.info("requesting gallery write permission")
        answer = await self._provider.request()
        self._state = answer
        if answer is not PermissionState.GRANTED:
            logger.warning("gallery write permission %s", answer.value)
        return answer
