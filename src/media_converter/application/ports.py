"""Application ports for the external collaborators of the workflow."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from media_converter.schemas import PickedFile
from media_converter.types import PermissionState, TargetFormat


class Picker(Protocol):
    """File selection dialog."""

    async def pick_image(self) -> PickedFile | None:
        """Return the chosen file, or ``None`` when the user cancelled."""


class Transcoder(Protocol):
    """Pixel re-encoding service."""

    async def transcode(
        self,
        locator: str,
        target_format: TargetFormat,
        quality: float,
    ) -> str:
        """Re-encode ``locator`` and return the locator of the new file."""


class FileStore(Protocol):
    """Platform file system."""

    def permanent_root(self) -> str:
        """Locator prefix of the app's permanent document storage."""

    async def move(self, source: str, destination: str) -> None:
        """Move a file, replacing nothing that already exists."""

    async def remove(self, locator: str) -> None:
        """Delete a file previously moved into permanent storage."""


class Gallery(Protocol):
    """System media gallery."""

    async def create_asset(self, locator: str) -> str:
        """Register a file as a gallery asset and return its handle."""

    async def create_album(self, name: str, asset: str, copy: bool) -> None:
        """Add ``asset`` to album ``name``, creating the album when missing."""


class PermissionProvider(Protocol):
    """Gallery write permission prompt."""

    async def get_status(self) -> PermissionState:
        """Current permission status without prompting."""

    async def request(self) -> PermissionState:
        """Prompt the user and return the answer."""


class AdEventListener(Protocol):
    """Callbacks delivered by an ad unit."""

    def on_loaded(self) -> None: ...

    def on_failed(self, reason: str) -> None: ...

    def on_closed(self) -> None: ...


class AdClient(Protocol):
    """A single ad unit from the ad network SDK."""

    def set_listener(self, listener: AdEventListener) -> None:
        """Install the event listener; replaces any previous one."""

    def load(self) -> None:
        """Start loading an ad; completion is reported via the listener."""

    async def show(self) -> None:
        """Display the loaded ad; returns once it is dismissed."""


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Delayed callback scheduling; ``asyncio`` event loops satisfy it."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` after ``delay`` seconds."""
