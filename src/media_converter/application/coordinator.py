"""Workflow coordinator: selection, conversion, persistence and ad interleaving."""

from __future__ import annotations

import logging
from collections.abc import Callable

from media_converter.ads.interstitial import InterstitialAdManager
from media_converter.application.options import WorkflowOptions
from media_converter.application.permissions import PermissionGate
from media_converter.application.pipeline import ConversionPipeline
from media_converter.application.ports import FileStore, Gallery, Picker, Transcoder
from media_converter.application.state import (
    EventBus,
    WorkflowEvent,
    WorkflowListener,
    WorkflowSnapshot,
    WorkflowState,
)
from media_converter.errors import (
    AlreadyInFlightError,
    ConversionError,
    NoSourceSelectedError,
    NothingToSaveError,
    PersistenceError,
    PermissionDeniedError,
    SelectionError,
    TranscodeError,
    UnsupportedMediaKindError,
    WorkflowError,
)
from media_converter.schemas import ConvertedArtifact, SourceArtifact
from media_converter.types import ConversionStage, EventKind, PermissionState

logger = logging.getLogger(__name__)


class WorkflowCoordinator:
    """Sequences pick -> convert -> save and owns the single-run invariant.

    Parameters
    ----------
    picker, transcoder, file_store, gallery
        External collaborators.
    permissions : PermissionGate
        Gate consulted before any gallery write.
    ads : InterstitialAdManager | None, default=None
        Interstitial shown best-effort around conversions.
    options : WorkflowOptions, optional
        Quality, album and ad placement configuration.
    pipeline : ConversionPipeline | None, default=None
        Format mapping and naming; built from ``options`` when omitted.
    """

    def __init__(
        self,
        *,
        picker: Picker,
        transcoder: Transcoder,
        file_store: FileStore,
        gallery: Gallery,
        permissions: PermissionGate,
        ads: InterstitialAdManager | None = None,
        options: WorkflowOptions = WorkflowOptions(),
        pipeline: ConversionPipeline | None = None,
    ) -> None:
        self._picker = picker
        self._transcoder = transcoder
        self._file_store = file_store
        self._gallery = gallery
        self._permissions = permissions
        self._ads = ads
        self._options = options
        self._pipeline = pipeline or ConversionPipeline(options.conversion.quality)
        self._state = WorkflowState()
        self._events = EventBus()

    @property
    def pipeline(self) -> ConversionPipeline:
        return self._pipeline

    def snapshot(self) -> WorkflowSnapshot:
        return self._state.snapshot()

    def subscribe(self, listener: WorkflowListener) -> Callable[[], None]:
        """Receive a :class:`WorkflowEvent` after each state change."""
        return self._events.subscribe(listener)

    async def start(self) -> None:
        """Preload the interstitial and warm the permission state."""
        if self._ads is not None:
            self._ads.load()
        try:
            state = await self._permissions.resolve()
        except Exception:
            logger.exception("could not determine gallery permission at start-up")
            return
        if state is not PermissionState.GRANTED:
            logger.info("gallery permission is %s; saving will be refused", state.value)

    async def close(self) -> None:
        if self._ads is not None:
            await self._ads.close()

    async def select_source(self) -> SourceArtifact | None:
        """Ask the picker for an image.

        Returns
        -------
        SourceArtifact | None
            The new source, or ``None`` if the user cancelled.

        Raises
        ------
        SelectionError
            If the picker itself failed.
        """
        try:
            picked = await self._picker.pick_image()
        except Exception as exc:
            logger.exception("file selection failed")
            raise SelectionError("Could not select the file.") from exc
        if picked is None:
            logger.info("file selection cancelled")
            self._emit("selection_cancelled", "No file selected.")
            return None
        source = SourceArtifact.from_picked(picked)
        self._state.select(source)
        logger.info("selected %s (%s, %s bytes)", source.display_name, source.media_kind, source.size_bytes)
        self._emit("source_selected")
        return source

    async def request_conversion(self, target_format: str) -> ConvertedArtifact:
        """Convert the selected source to ``target_format``.

        Raises
        ------
        NoSourceSelectedError
            If nothing is selected.
        UnsupportedMediaKindError
            If the source is not an image.
        AlreadyInFlightError
            If another run is active.
        UnsupportedFormatError
            If the format has no transcoder token.
        TranscodeError, PersistenceError
            If the transcoder or the move into storage failed.
        """
        source = self._state.source
        if source is None:
            raise NoSourceSelectedError()
        if not source.is_image:
            raise UnsupportedMediaKindError(source.media_kind)
        if self._state.in_flight:
            raise AlreadyInFlightError()
        self._state.begin_run()
        try:
            converted = await self._run(source, target_format)
        except WorkflowError as exc:
            self._abort(exc)
            raise
        except Exception as exc:
            error = ConversionError(f"Conversion failed: {_describe(exc)}", stage=self._state.stage)
            self._abort(error)
            raise error from exc
        self._state.finish_run(converted)
        logger.info("converted %s -> %s", source.display_name, converted.display_name)
        self._emit("converted", f"Image converted to {self._pipeline.normalize(target_format)}.")
        if self._options.conversion.ad_placement == "after":
            self._show_ad()
        return converted

    async def persist_result(self) -> str:
        """Save the converted file into the gallery album.

        Returns
        -------
        str
            Gallery asset handle.

        Raises
        ------
        NothingToSaveError
            If no conversion has succeeded for the current source.
        PermissionDeniedError
            If the user refused gallery access.
        PersistenceError
            If the gallery write failed.
        """
        converted = self._state.converted
        if converted is None:
            raise NothingToSaveError()
        persist = self._options.persist
        try:
            await self._permissions.ensure_granted()
            asset = await self._gallery.create_asset(converted.locator)
            await self._gallery.create_album(persist.album_name, asset, persist.copy_to_album)
        except PermissionDeniedError as exc:
            self._emit("save_failed", str(exc))
            raise
        except Exception as exc:
            logger.exception("saving %s failed", converted.display_name)
            self._emit("save_failed", "Could not save the file.")
            raise PersistenceError("Could not save the file.") from exc
        logger.info("saved %s to album %s", converted.display_name, persist.album_name)
        self._emit("saved", "File saved to the gallery.")
        return asset

    async def _run(self, source: SourceArtifact, target_format: str) -> ConvertedArtifact:
        self._advance(ConversionStage.ACCEPTED)
        if self._options.conversion.ad_placement == "before":
            self._show_ad()
        token = self._pipeline.resolve_format(target_format, stage=ConversionStage.ACCEPTED)
        self._advance(ConversionStage.DISPATCHED)
        try:
            produced = await self._transcoder.transcode(
                source.locator,
                token,
                self._pipeline.quality,
            )
        except Exception as exc:
            raise TranscodeError(
                f"Conversion failed: {_describe(exc)}",
                stage=ConversionStage.DISPATCHED,
            ) from exc
        self._ensure_current(source, ConversionStage.DISPATCHED)
        self._advance(ConversionStage.TRANSCODED)
        name = self._pipeline.output_name(target_format)
        try:
            destination = self._pipeline.join(self._file_store.permanent_root(), name)
            await self._file_store.move(produced, destination)
        except Exception as exc:
            raise PersistenceError(
                f"Could not store the converted file: {_describe(exc)}",
                stage=ConversionStage.TRANSCODED,
            ) from exc
        if self._state.source is not source:
            await self._discard(destination)
        self._ensure_current(source, ConversionStage.TRANSCODED)
        self._advance(ConversionStage.PERSISTED)
        return ConvertedArtifact(
            locator=destination,
            display_name=name,
            target_format=token,
            source_display_name=source.display_name,
        )

    def _ensure_current(self, source: SourceArtifact, stage: ConversionStage) -> None:
        # A newer selection supersedes this run.
        if self._state.source is not source:
            raise ConversionError("The selected file changed during conversion.", stage=stage)

    async def _discard(self, locator: str) -> None:
        try:
            await self._file_store.remove(locator)
        except Exception:
            logger.exception("could not remove superseded output %s", locator)

    def _advance(self, stage: ConversionStage) -> None:
        self._state.advance(stage)
        logger.debug("conversion stage %s (%d%%)", stage.name, stage)
        self._emit("progress")

    def _abort(self, exc: WorkflowError) -> None:
        logger.error("conversion failed at %s: %s", self._state.stage.name, exc)
        self._state.fail_run()
        self._emit("conversion_failed", str(exc))

    def _show_ad(self) -> None:
        if self._ads is None:
            return
        try:
            self._ads.show_if_ready()
        except Exception:
            logger.exception("interstitial display raised")

    def _emit(self, kind: EventKind, message: str | None = None) -> None:
        self._events.publish(WorkflowEvent(kind=kind, snapshot=self._state.snapshot(), message=message))


def _describe(exc: BaseException) -> str:
    return str(exc) or "unknown error"
