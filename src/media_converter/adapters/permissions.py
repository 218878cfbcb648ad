"""Permission provider answering from configuration."""

from __future__ import annotations

from media_converter.types import PermissionState


class StaticPermissionProvider:
    """Reports ``initial`` until asked, then answers per ``grant_on_request``."""

    def __init__(
        self,
        initial: PermissionState = PermissionState.UNKNOWN,
        grant_on_request: bool = True,
    ) -> None:
        self._status = initial
        self._grant_on_request = grant_on_request
        self.requests = 0

    async def get_status(self) -> PermissionState:
        return self._status

    async def request(self) -> PermissionState:
        self.requests += 1
        self._status = PermissionState.GRANTED if self._grant_on_request else PermissionState.DENIED
        return self._status
