#!/usr/bin/env python3
"""Run one select -> convert -> save cycle and print every workflow event.

Usage:

    python examples/observe_workflow.py path/to/photo.heic PNG
"""

from __future__ import annotations

import asyncio
import logging
import sys
import tempfile
from pathlib import Path

from media_converter.app import build_local_workflow
from media_converter.application.state import WorkflowEvent
from media_converter.config import load_settings
from media_converter.errors import WorkflowError


def _print_event(event: WorkflowEvent) -> None:
    snapshot = event.snapshot
    print(
        f"{event.kind:<20} progress={snapshot.progress:>3} "
        f"in_flight={snapshot.in_flight!s:<5} {event.message or ''}"
    )


async def main(source: Path, target_format: str) -> int:
    workdir = Path(tempfile.mkdtemp(prefix="media-converter-example-"))
    settings = load_settings(
        storage_root=workdir / "documents",
        gallery_root=workdir / "gallery",
        permission="granted",
        ad_retry_delay=1.0,
    )
    workflow = build_local_workflow(settings, source, ad_load_delay=0.05)
    coordinator = workflow.coordinator
    coordinator.subscribe(_print_event)

    workflow.banner.attach()
    await coordinator.start()
    # Give the interstitial a chance to preload; conversions never wait for it.
    await asyncio.sleep(0.1)
    try:
        await coordinator.select_source()
        converted = await coordinator.request_conversion(target_format)
        await coordinator.persist_result()
    except WorkflowError as exc:
        print(f"failed: {exc}")
        return 1
    finally:
        await coordinator.close()

    print(f"converted: {converted.locator}")
    print(f"interstitial: {workflow.interstitial.state.value}, banner: {workflow.banner.state.value}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if len(sys.argv) != 3:
        raise SystemExit(__doc__)
    raise SystemExit(asyncio.run(main(Path(sys.argv[1]), sys.argv[2])))
