"""Suite markers and shared pytest hooks."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import pytest

# Rich wraps CLI error panels at 80 columns when output is captured, which
# splits messages asserted on by the e2e tests; use a wide, fixed width.
os.environ["COLUMNS"] = "200"

_SUITE_MARKERS = {
    "e2e_tests": pytest.mark.e2e,
    "integration_tests": pytest.mark.integration,
    "unit_tests": pytest.mark.unit,
}


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Mark tests by suite directory; skip e2e when the CLI is not installed."""
    del config
    cli_installed = shutil.which("media-converter") is not None
    skip_e2e = pytest.mark.skip(reason="media-converter entrypoint is not on PATH")
    for item in items:
        parts = set(Path(str(item.fspath)).parts)
        for directory, marker in _SUITE_MARKERS.items():
            if directory in parts:
                item.add_marker(marker)
                if directory == "e2e_tests" and not cli_installed:
                    item.add_marker(skip_e2e)
                break
