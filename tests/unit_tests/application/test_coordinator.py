"""Unit tests for the workflow coordinator contracts."""

from __future__ import annotations

import asyncio
import re

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from media_converter.application.state import WorkflowEvent
from media_converter.errors import (
    AlreadyInFlightError,
    ConversionError,
    NoSourceSelectedError,
    NothingToSaveError,
    PermissionDeniedError,
    PersistenceError,
    SelectionError,
    TranscodeError,
    UnsupportedFormatError,
    UnsupportedMediaKindError,
)
from media_converter.types import AdState, ConversionStage, PermissionState, TargetFormat
from support.doubles import HEIC_PHOTO, PDF_DOC, PNG_PHOTO, make_harness


@pytest.mark.asyncio
async def test_heic_to_png_roundtrip_contract() -> None:
    """Convert a selected HEIC photo into a uniquely named PNG artifact."""
    harness = make_harness(HEIC_PHOTO)
    coordinator = harness.coordinator

    source = await coordinator.select_source()
    converted = await coordinator.request_conversion("PNG")

    assert source is not None
    assert source.extension == "heic"
    assert converted.target_format is TargetFormat.PNG
    assert re.fullmatch(r"converted_\d+\.png", converted.display_name)
    assert converted.source_display_name == "photo.heic"
    assert converted.locator == f"file:///data/documents/{converted.display_name}"
    assert harness.transcoder.calls == [
        ("content://media/photo.heic", TargetFormat.PNG, 0.9)
    ]
    snapshot = coordinator.snapshot()
    assert snapshot.converted == converted
    assert snapshot.progress == 100
    assert not snapshot.in_flight


@pytest.mark.asyncio
async def test_progress_stages_are_reported_in_order() -> None:
    """Report 10, 30, 70 and 100 percent before publishing the result."""
    harness = make_harness(PNG_PHOTO)
    events: list[WorkflowEvent] = []
    harness.coordinator.subscribe(events.append)

    await harness.coordinator.select_source()
    await harness.coordinator.request_conversion("webp")

    progress = [e.snapshot.progress for e in events if e.kind == "progress"]
    assert progress == [10, 30, 70, 100]
    assert events[-1].kind == "converted"
    assert events[-1].snapshot.converted is not None


@pytest.mark.asyncio
async def test_jpg_request_keeps_jpg_extension() -> None:
    """Map JPG to the JPEG token while naming the file with .jpg."""
    harness = make_harness(PNG_PHOTO)
    await harness.coordinator.select_source()

    converted = await harness.coordinator.request_conversion("JPG")

    assert converted.target_format is TargetFormat.JPEG
    assert converted.display_name.endswith(".jpg")


@pytest.mark.asyncio
async def test_selection_check_precedes_format_check() -> None:
    """Reject an unknown format with NoSourceSelected when nothing is selected."""
    harness = make_harness()
    with pytest.raises(NoSourceSelectedError):
        await harness.coordinator.request_conversion("BMP")
    assert harness.coordinator.snapshot().progress == 0


@pytest.mark.asyncio
async def test_unsupported_format_fails_before_transcoding() -> None:
    """Fail fast on unknown formats without calling the transcoder."""
    harness = make_harness(PNG_PHOTO)
    await harness.coordinator.select_source()

    with pytest.raises(UnsupportedFormatError) as excinfo:
        await harness.coordinator.request_conversion("BMP")

    assert excinfo.value.stage is ConversionStage.ACCEPTED
    assert harness.transcoder.calls == []
    snapshot = harness.coordinator.snapshot()
    assert snapshot.progress == 0
    assert not snapshot.in_flight
    assert snapshot.converted is None


@pytest.mark.asyncio
async def test_non_image_source_is_rejected() -> None:
    """Reject sources whose MIME type is not an image."""
    harness = make_harness(PDF_DOC)
    await harness.coordinator.select_source()

    with pytest.raises(UnsupportedMediaKindError):
        await harness.coordinator.request_conversion("PNG")
    assert harness.transcoder.calls == []


@pytest.mark.asyncio
async def test_second_concurrent_request_is_rejected() -> None:
    """Allow one run at a time and produce exactly one artifact."""
    harness = make_harness(PNG_PHOTO)
    harness.transcoder.gate = asyncio.Event()
    await harness.coordinator.select_source()

    first = asyncio.create_task(harness.coordinator.request_conversion("PNG"))
    await asyncio.sleep(0)
    assert harness.coordinator.snapshot().in_flight

    with pytest.raises(AlreadyInFlightError):
        await harness.coordinator.request_conversion("JPEG")

    harness.transcoder.gate.set()
    converted = await first

    assert len(harness.transcoder.calls) == 1
    assert len(harness.file_store.moves) == 1
    assert harness.coordinator.snapshot().converted == converted


@pytest.mark.asyncio
async def test_gathered_requests_yield_single_artifact() -> None:
    """Reject the second of two simultaneously scheduled requests."""
    harness = make_harness(PNG_PHOTO)
    harness.transcoder.gate = asyncio.Event()
    await harness.coordinator.select_source()

    pending = asyncio.gather(
        harness.coordinator.request_conversion("PNG"),
        harness.coordinator.request_conversion("WEBP"),
        return_exceptions=True,
    )
    await asyncio.sleep(0)
    harness.transcoder.gate.set()
    results = await pending

    assert isinstance(results[1], AlreadyInFlightError)
    assert results[0] == harness.coordinator.snapshot().converted
    assert len(harness.file_store.moves) == 1


@pytest.mark.asyncio
async def test_transcode_failure_resets_progress_and_flag() -> None:
    """Surface TranscodeError, reset progress and allow a later retry."""
    harness = make_harness(PNG_PHOTO)
    events: list[WorkflowEvent] = []
    harness.coordinator.subscribe(events.append)
    harness.transcoder.error = RuntimeError("decoder crashed")
    await harness.coordinator.select_source()

    with pytest.raises(TranscodeError, match="decoder crashed") as excinfo:
        await harness.coordinator.request_conversion("PNG")

    assert excinfo.value.stage is ConversionStage.DISPATCHED
    snapshot = harness.coordinator.snapshot()
    assert snapshot.progress == 0
    assert not snapshot.in_flight
    assert snapshot.converted is None
    assert events[-1].kind == "conversion_failed"
    assert "decoder crashed" in (events[-1].message or "")

    harness.transcoder.error = None
    converted = await harness.coordinator.request_conversion("PNG")
    assert harness.coordinator.snapshot().converted == converted


@pytest.mark.asyncio
async def test_move_failure_publishes_nothing() -> None:
    """Raise PersistenceError when storing the output fails."""
    harness = make_harness(PNG_PHOTO)
    harness.file_store.error = OSError("disk full")
    await harness.coordinator.select_source()

    with pytest.raises(PersistenceError, match="disk full") as excinfo:
        await harness.coordinator.request_conversion("PNG")

    assert excinfo.value.stage is ConversionStage.TRANSCODED
    snapshot = harness.coordinator.snapshot()
    assert snapshot.converted is None
    assert snapshot.progress == 0
    assert not snapshot.in_flight


@pytest.mark.asyncio
async def test_selection_during_conversion_discards_result() -> None:
    """Stop reporting progress for a replaced source and store nothing."""
    harness = make_harness(PNG_PHOTO, HEIC_PHOTO)
    events: list[WorkflowEvent] = []
    harness.coordinator.subscribe(events.append)
    harness.transcoder.gate = asyncio.Event()
    await harness.coordinator.select_source()

    run = asyncio.create_task(harness.coordinator.request_conversion("PNG"))
    await asyncio.sleep(0)
    await harness.coordinator.select_source()
    harness.transcoder.gate.set()

    with pytest.raises(ConversionError, match="changed"):
        await run
    trail = [
        (e.kind, e.snapshot.progress, e.snapshot.source.display_name if e.snapshot.source else None)
        for e in events
    ]
    assert trail == [
        ("source_selected", 0, "screenshot.png"),
        ("progress", 10, "screenshot.png"),
        ("progress", 30, "screenshot.png"),
        ("source_selected", 0, "photo.heic"),
        ("conversion_failed", 0, "photo.heic"),
    ]
    assert harness.file_store.moves == []
    snapshot = harness.coordinator.snapshot()
    assert snapshot.converted is None
    assert not snapshot.in_flight
    assert snapshot.source is not None
    assert snapshot.source.display_name == "photo.heic"


@pytest.mark.asyncio
async def test_selection_during_move_removes_stored_output() -> None:
    """Delete the output of a run superseded while it was being stored."""
    harness = make_harness(PNG_PHOTO, HEIC_PHOTO)
    events: list[WorkflowEvent] = []
    harness.coordinator.subscribe(events.append)
    harness.file_store.gate = asyncio.Event()
    await harness.coordinator.select_source()

    run = asyncio.create_task(harness.coordinator.request_conversion("PNG"))
    await asyncio.sleep(0)
    await harness.coordinator.select_source()
    harness.file_store.gate.set()

    with pytest.raises(ConversionError, match="changed") as excinfo:
        await run
    assert excinfo.value.stage is ConversionStage.TRANSCODED
    [(_, destination)] = harness.file_store.moves
    assert harness.file_store.removed == [destination]
    progress = [e.snapshot.progress for e in events if e.kind == "progress"]
    assert progress == [10, 30, 70]
    assert events[-1].kind == "conversion_failed"
    assert harness.coordinator.snapshot().converted is None


@pytest.mark.asyncio
async def test_storage_root_failure_is_persistence_error() -> None:
    """Report an unusable storage directory as a persistence failure."""
    harness = make_harness(PNG_PHOTO)
    harness.file_store.root_error = PermissionError("read-only file system")
    await harness.coordinator.select_source()

    with pytest.raises(PersistenceError, match="read-only") as excinfo:
        await harness.coordinator.request_conversion("PNG")

    assert excinfo.value.stage is ConversionStage.TRANSCODED
    assert harness.file_store.moves == []
    snapshot = harness.coordinator.snapshot()
    assert snapshot.progress == 0
    assert not snapshot.in_flight


@pytest.mark.asyncio
async def test_transcode_error_without_message_reads_unknown() -> None:
    """Fall back to a generic reason when the transcoder gives none."""
    harness = make_harness(PNG_PHOTO)
    harness.transcoder.error = RuntimeError()
    await harness.coordinator.select_source()

    with pytest.raises(TranscodeError) as excinfo:
        await harness.coordinator.request_conversion("PNG")

    assert str(excinfo.value) == "Conversion failed: unknown error"


@pytest.mark.asyncio
async def test_new_selection_clears_result() -> None:
    """Clear the converted artifact and progress on a new selection."""
    harness = make_harness(PNG_PHOTO, HEIC_PHOTO)
    await harness.coordinator.select_source()
    await harness.coordinator.request_conversion("PNG")

    await harness.coordinator.select_source()

    snapshot = harness.coordinator.snapshot()
    assert snapshot.converted is None
    assert snapshot.progress == 0
    assert snapshot.source is not None
    assert snapshot.source.display_name == "photo.heic"


@pytest.mark.asyncio
async def test_cancelled_selection_keeps_state() -> None:
    """Leave the current source and result untouched when the user cancels."""
    harness = make_harness(PNG_PHOTO, None)
    events: list[WorkflowEvent] = []
    await harness.coordinator.select_source()
    converted = await harness.coordinator.request_conversion("PNG")
    harness.coordinator.subscribe(events.append)

    assert await harness.coordinator.select_source() is None

    snapshot = harness.coordinator.snapshot()
    assert snapshot.converted == converted
    assert snapshot.source is not None
    assert [e.kind for e in events] == ["selection_cancelled"]


@pytest.mark.asyncio
async def test_picker_failure_raises_selection_error() -> None:
    """Wrap picker crashes into SelectionError."""
    harness = make_harness(PermissionError("sandbox"))
    with pytest.raises(SelectionError):
        await harness.coordinator.select_source()
    assert harness.coordinator.snapshot().source is None


@pytest.mark.property
@settings(max_examples=40, deadline=None, suppress_health_check=[HealthCheck.too_slow])
@given(steps=st.lists(st.sampled_from(["select", "convert", "cancel"]), max_size=12))
def test_result_always_derives_from_current_source(steps: list[str]) -> None:
    """Property check: a shown result always belongs to the latest selection."""

    async def scenario() -> None:
        harness = make_harness()
        coordinator = harness.coordinator
        for index, step in enumerate(steps):
            if step == "select":
                harness.picker.queue(PNG_PHOTO.model_copy(update={"name": f"p{index}.png"}))
                await coordinator.select_source()
                assert coordinator.snapshot().converted is None
            elif step == "cancel":
                harness.picker.queue(None)
                before = coordinator.snapshot()
                await coordinator.select_source()
                assert coordinator.snapshot() == before
            elif coordinator.snapshot().source is None:
                with pytest.raises(NoSourceSelectedError):
                    await coordinator.request_conversion("PNG")
            else:
                await coordinator.request_conversion("PNG")
            snapshot = coordinator.snapshot()
            if snapshot.converted is not None:
                assert snapshot.source is not None
                assert snapshot.converted.source_display_name == snapshot.source.display_name

    asyncio.run(scenario())


@pytest.mark.asyncio
async def test_persist_without_result_fails() -> None:
    """Refuse to save before any conversion succeeded."""
    harness = make_harness(PNG_PHOTO)
    await harness.coordinator.select_source()
    with pytest.raises(NothingToSaveError):
        await harness.coordinator.persist_result()
    assert harness.gallery.assets == []


@pytest.mark.asyncio
async def test_persist_saves_into_album_idempotently() -> None:
    """Save twice into the same album without failing on the existing album."""
    harness = make_harness(PNG_PHOTO)
    await harness.coordinator.select_source()
    converted = await harness.coordinator.request_conversion("PNG")

    first = await harness.coordinator.persist_result()
    second = await harness.coordinator.persist_result()

    assert harness.gallery.assets == [converted.locator, converted.locator]
    assert harness.gallery.albums == {"Conversões": [first, second]}


@pytest.mark.asyncio
async def test_persist_requests_permission_when_undetermined() -> None:
    """Prompt for permission once when its state is unknown."""
    harness = make_harness(PNG_PHOTO, permission=PermissionState.UNKNOWN)
    await harness.coordinator.select_source()
    await harness.coordinator.request_conversion("PNG")

    await harness.coordinator.persist_result()

    assert harness.permissions.requests == 1
    assert len(harness.gallery.assets) == 1


@pytest.mark.asyncio
async def test_persist_denied_keeps_result() -> None:
    """Raise PermissionDenied and leave the converted result in place."""
    harness = make_harness(
        PNG_PHOTO,
        permission=PermissionState.UNKNOWN,
        answer=PermissionState.DENIED,
    )
    events: list[WorkflowEvent] = []
    harness.coordinator.subscribe(events.append)
    await harness.coordinator.select_source()
    converted = await harness.coordinator.request_conversion("PNG")

    with pytest.raises(PermissionDeniedError):
        await harness.coordinator.persist_result()

    assert harness.coordinator.snapshot().converted == converted
    assert harness.gallery.assets == []
    assert events[-1].kind == "save_failed"


@pytest.mark.asyncio
async def test_gallery_failure_is_persistence_error() -> None:
    """Wrap gallery errors into a single PersistenceError."""
    harness = make_harness(PNG_PHOTO)
    harness.gallery.error = OSError("read-only")
    await harness.coordinator.select_source()
    await harness.coordinator.request_conversion("PNG")

    with pytest.raises(PersistenceError, match="Could not save"):
        await harness.coordinator.persist_result()


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_workflow() -> None:
    """Keep converting when an observer raises."""
    harness = make_harness(PNG_PHOTO)

    def broken(event: WorkflowEvent) -> None:
        raise RuntimeError("ui gone")

    harness.coordinator.subscribe(broken)
    await harness.coordinator.select_source()
    converted = await harness.coordinator.request_conversion("PNG")
    assert converted.target_format is TargetFormat.PNG


@pytest.mark.asyncio
async def test_unsubscribe_stops_notifications() -> None:
    """Stop delivering events once a listener unsubscribes."""
    harness = make_harness(PNG_PHOTO)
    events: list[WorkflowEvent] = []
    unsubscribe = harness.coordinator.subscribe(events.append)
    unsubscribe()
    await harness.coordinator.select_source()
    assert events == []


@pytest.mark.asyncio
async def test_start_preloads_ad_and_warms_permission() -> None:
    """Issue an ad load and resolve permission on start-up."""
    harness = make_harness(permission=PermissionState.UNKNOWN)

    await harness.coordinator.start()

    assert harness.ad_client.loads == 1
    assert harness.ads.state is AdState.LOADING
    assert harness.permissions.requests == 1


@pytest.mark.asyncio
async def test_ad_before_conversion_is_shown_when_ready() -> None:
    """Show a ready interstitial when a conversion is accepted."""
    harness = make_harness(PNG_PHOTO, ad_placement="before")
    harness.ads.load()
    harness.ad_client.fire_loaded()
    await harness.coordinator.select_source()

    await harness.coordinator.request_conversion("PNG")
    await asyncio.sleep(0)

    assert harness.ad_client.shows == 1


@pytest.mark.asyncio
async def test_ad_after_conversion_is_not_shown_on_failure() -> None:
    """Only show the after-placement ad once a result is published."""
    harness = make_harness(PNG_PHOTO, ad_placement="after")
    harness.ads.load()
    harness.ad_client.fire_loaded()
    harness.transcoder.error = RuntimeError("boom")
    await harness.coordinator.select_source()

    with pytest.raises(TranscodeError):
        await harness.coordinator.request_conversion("PNG")
    await asyncio.sleep(0)
    assert harness.ad_client.shows == 0

    harness.transcoder.error = None
    await harness.coordinator.request_conversion("PNG")
    await asyncio.sleep(0)
    assert harness.ad_client.shows == 1


@pytest.mark.asyncio
async def test_ad_failures_never_fail_conversion() -> None:
    """Convert normally while the ad unit fails to load and to show."""
    harness = make_harness(PNG_PHOTO, ad_placement="before")
    harness.ad_client.load_error = RuntimeError("sdk not initialised")
    await harness.coordinator.select_source()

    converted = await harness.coordinator.request_conversion("PNG")

    assert converted.target_format is TargetFormat.PNG
    assert harness.ads.state is AdState.FAILED
    assert len(harness.scheduler.pending) == 1


@pytest.mark.asyncio
async def test_ad_show_error_is_absorbed() -> None:
    """Absorb an interstitial display error raised mid-conversion."""
    harness = make_harness(PNG_PHOTO, ad_placement="before")
    harness.ads.load()
    harness.ad_client.fire_loaded()
    harness.ad_client.show_error = RuntimeError("activity destroyed")
    await harness.coordinator.select_source()

    await harness.coordinator.request_conversion("PNG")
    await asyncio.sleep(0)

    assert harness.coordinator.snapshot().converted is not None
    assert harness.ads.state is AdState.FAILED
    assert harness.ads.last_failure is not None
