"""Application layer: ports, options and the workflow coordinator."""

from __future__ import annotations

from media_converter.application.options import (
    AdOptions,
    ConversionOptions,
    PersistOptions,
    WorkflowOptions,
)
from media_converter.application.state import WorkflowEvent, WorkflowSnapshot

__all__ = [
    "AdOptions",
    "ConversionOptions",
    "PersistOptions",
    "WorkflowOptions",
    "WorkflowEvent",
    "WorkflowSnapshot",
]
