"""Phase timing for one rebuild run."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

import structlog

log = structlog.get_logger("jar_rebuilder.pipeline")


@dataclass
class PhaseProgress:
    phase: str
    status: str = "running"  # "running" | "completed" | "failed" | "skipped"
    start_time: float | None = None
    end_time: float | None = None
    detail: str = ""
    error: str | None = None

    @property
    def duration(self) -> float | None:
        if self.start_time is not None and self.end_time is not None:
            return round(self.end_time - self.start_time, 3)
        return None


class ProgressTracker:
    """Ordered record of pipeline phases (scaffold, scan, resolve, assemble)."""

    def __init__(self) -> None:
        self.phases: list[PhaseProgress] = []

    @contextmanager
    def phase(self, name: str) -> Iterator[PhaseProgress]:
        """Time a phase; an exception marks it failed and propagates."""
        p = PhaseProgress(phase=name, start_time=time.monotonic())
        self.phases.append(p)
        log.debug("pipeline.phase_started", phase=name)
        try:
            yield p
        except Exception as e:
            p.status = "failed"
            p.end_time = time.monotonic()
            p.error = str(e)
            log.error("pipeline.phase_failed", phase=name, error=str(e))
            raise
        p.status = "completed"
        p.end_time = time.monotonic()
        log.info("pipeline.phase_completed", phase=name, duration=p.duration, detail=p.detail)

    def skip(self, name: str, reason: str) -> None:
        self.phases.append(PhaseProgress(phase=name, status="skipped", detail=reason))
        log.info("pipeline.phase_skipped", phase=name, reason=reason)

    def get_summary(self) -> dict[str, Any]:
        return {
            "phases": [
                {
                    "phase": p.phase,
                    "status": p.status,
                    "duration": p.duration,
                    "detail": p.detail,
                    "error": p.error,
                }
                for p in self.phases
            ],
            "total_duration": round(sum(p.duration or 0 for p in self.phases), 3),
        }
