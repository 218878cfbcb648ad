"""Coordinator-owned workflow state and its observer mechanism."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

from media_converter.schemas import ConvertedArtifact, SourceArtifact
from media_converter.types import ConversionStage, EventKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowSnapshot:
    """Immutable view of the workflow at one point in time."""

    source: SourceArtifact | None
    converted: ConvertedArtifact | None
    stage: ConversionStage
    in_flight: bool

    @property
    def progress(self) -> int:
        return int(self.stage)


@dataclass(frozen=True)
class WorkflowEvent:
    """Notification delivered to subscribers after every state change."""

    kind: EventKind
    snapshot: WorkflowSnapshot
    message: str | None = None


WorkflowListener: TypeAlias = Callable[[WorkflowEvent], None]


class WorkflowState:
    """Selection holder, result holder and progress of the current run."""

    def __init__(self) -> None:
        self.source: SourceArtifact | None = None
        self.converted: ConvertedArtifact | None = None
        self.stage = ConversionStage.IDLE
        self.in_flight = False

    def select(self, source: SourceArtifact) -> None:
        """Replace the source and drop any result derived from the old one."""
        self.source = source
        self.converted = None
        self.stage = ConversionStage.IDLE

    def advance(self, stage: ConversionStage) -> None:
        if stage < self.stage:
            raise ValueError(f"progress cannot move back from {self.stage.name} to {stage.name}")
        self.stage = stage

    def begin_run(self) -> None:
        self.in_flight = True
        self.stage = ConversionStage.IDLE

    def fail_run(self) -> None:
        self.stage = ConversionStage.IDLE
        self.in_flight = False

    def finish_run(self, converted: ConvertedArtifact) -> None:
        self.converted = converted
        self.in_flight = False

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            source=self.source,
            converted=self.converted,
            stage=self.stage,
            in_flight=self.in_flight,
        )


class EventBus:
    """Fan-out of workflow events to subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[WorkflowListener] = []

    def subscribe(self, listener: WorkflowListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, event: WorkflowEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("workflow listener failed on %s event", event.kind)
