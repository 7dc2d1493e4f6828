"""Per-step timings for a deploy run.

Every run records how long each step took and how it ended. The timeline is
only surfaced in ``ServiceResult.meta`` when ``--verbose`` switched timings
on, so quiet and JSON runs keep a stable payload.
"""

from __future__ import annotations

import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog

_timings_enabled: ContextVar[bool] = ContextVar("_timings_enabled", default=False)

log = structlog.get_logger("pagesctl.telemetry")


@dataclass
class StepTiming:
    """Timing and outcome of one deploy step."""

    step: str
    started: float = field(default_factory=time.perf_counter)
    duration_ms: float = 0.0
    outcome: str = "running"
    counts: dict[str, int] = field(default_factory=dict)

    def count(self, key: str, value: int) -> None:
        """Attach a figure such as the number of published files."""
        self.counts[key] = value

    def finish(self, outcome: str) -> None:
        self.duration_ms = (time.perf_counter() - self.started) * 1000
        self.outcome = outcome

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "step": self.step,
            "outcome": self.outcome,
            "duration_ms": round(self.duration_ms, 2),
        }
        data.update(self.counts)
        return data


@dataclass
class DeployTimeline:
    """Ordered step timings for a single run. Steps never reached are absent."""

    started: float = field(default_factory=time.perf_counter)
    steps: list[StepTiming] = field(default_factory=list)

    @contextmanager
    def step(self, name: str) -> Generator[StepTiming]:
        timing = StepTiming(step=name)
        self.steps.append(timing)
        try:
            yield timing
        except BaseException:
            timing.finish("failed")
            log.debug("step.complete", step=name, outcome="failed", duration_ms=timing.duration_ms)
            raise
        timing.finish("ok")
        log.debug("step.complete", step=name, outcome="ok", duration_ms=timing.duration_ms)

    @property
    def total_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000

    def summary(self) -> dict[str, Any]:
        return {
            "total_ms": round(self.total_ms, 2),
            "steps": [t.to_dict() for t in self.steps],
        }


def step_timings_enabled() -> bool:
    return _timings_enabled.get()


def enable_step_timings() -> None:
    """Surface step timings in results (called by AppContext for ``--verbose``)."""
    _timings_enabled.set(True)


def disable_step_timings() -> None:
    _timings_enabled.set(False)
