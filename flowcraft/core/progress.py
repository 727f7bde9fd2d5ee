# flowcraft/core/progress.py

from __future__ import annotations
import asyncio
import logging
import math
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional

from flowcraft.core.models import ProgressUpdate

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[ProgressUpdate], None]


class Phase(str, Enum):
    """Canonical phases of one run, in order."""
    DISCOVERY = "discovery"
    RESEARCH = "research"
    INTEGRATION = "integration"
    GENERATION = "generation"
    COMPLETE = "complete"


PHASE_ORDER = list(Phase)

# Used when an engine update carries no percentage of its own.
DEFAULT_PERCENTAGE = {
    Phase.DISCOVERY: 10,
    Phase.RESEARCH: 30,
    Phase.INTEGRATION: 55,
    Phase.GENERATION: 80,
    Phase.COMPLETE: 100,
}

# Engine vocabularies (agent, planner, loading screen) -> canonical phase.
_ENGINE_PHASES = {
    "discovery": Phase.DISCOVERY,
    "analyzing": Phase.DISCOVERY,
    "analysis": Phase.DISCOVERY,
    "classifying": Phase.DISCOVERY,
    "fast_generation": Phase.DISCOVERY,
    "research": Phase.RESEARCH,
    "researching": Phase.RESEARCH,
    "planning": Phase.RESEARCH,
    "integration": Phase.INTEGRATION,
    "connecting": Phase.INTEGRATION,
    "generation": Phase.GENERATION,
    "generating": Phase.GENERATION,
    "optimizing": Phase.GENERATION,
    "complete": Phase.COMPLETE,
    "completed": Phase.COMPLETE,
    "done": Phase.COMPLETE,
}

# Four-step loading screen: analyzing, planning, generating, connecting.
_LOADING_PHASES = {
    Phase.DISCOVERY: "analyzing",
    Phase.RESEARCH: "planning",
    Phase.INTEGRATION: "planning",
    Phase.GENERATION: "generating",
    Phase.COMPLETE: "connecting",
}


def normalize_phase(raw: Any) -> Optional[Phase]:
    if isinstance(raw, Phase):
        return raw
    return _ENGINE_PHASES.get(str(raw or "").strip().lower())


def to_loading_phase(phase: Any) -> str:
    p = normalize_phase(phase) or Phase.DISCOVERY
    return _LOADING_PHASES[p]


def _rank(phase: Phase) -> int:
    return PHASE_ORDER.index(phase)


def _coerce_percentage(value: Any, phase: Phase) -> int:
    """Clamp to 0..100; missing or unparseable values take the phase default."""
    if value is None:
        return DEFAULT_PERCENTAGE[phase]
    try:
        pct = float(value)
    except (TypeError, ValueError):
        pct = math.nan
    if math.isnan(pct):
        logger.warning("Unparseable progress value %r for %s; using default", value, phase.value)
        return DEFAULT_PERCENTAGE[phase]
    return int(max(0.0, min(100.0, pct)))


class ProgressChannel:
    """
    Ordered, synchronous progress notifications for a single run.

    Every accepted update is delivered to each observer registered at that
    moment and appended to the run's trail. Percentages and phases never go
    backwards; `complete` is delivered at most once and nothing follows it.
    """

    def __init__(self, observer: Optional[ProgressObserver] = None) -> None:
        self._observers: List[ProgressObserver] = []
        self._updates: List[ProgressUpdate] = []
        self._phase: Optional[Phase] = None
        self._percentage = 0
        if observer is not None:
            self.subscribe(observer)

    def subscribe(self, observer: ProgressObserver) -> None:
        self._observers.append(observer)

    @property
    def updates(self) -> List[ProgressUpdate]:
        return list(self._updates)

    @property
    def completed(self) -> bool:
        return self._phase is Phase.COMPLETE

    def report(self, phase: Any, message: Any, percentage: Any = None) -> Optional[ProgressUpdate]:
        """Translate an engine-style update and emit it."""
        p = normalize_phase(phase) or self._phase or Phase.DISCOVERY
        return self.emit(ProgressUpdate(
            phase=p.value,
            message=str(message or ""),
            percentage=_coerce_percentage(percentage, p),
        ))

    def emit(self, update: ProgressUpdate) -> Optional[ProgressUpdate]:
        if self.completed:
            logger.warning("Progress after completion discarded: %s", update.message)
            return None

        phase = normalize_phase(update.phase) or self._phase or Phase.DISCOVERY
        if self._phase is not None and _rank(phase) < _rank(self._phase):
            phase = self._phase
        percentage = max(self._percentage, update.percentage)
        if phase is Phase.COMPLETE:
            percentage = 100

        accepted = ProgressUpdate(phase=phase.value, message=update.message, percentage=percentage)
        self._phase = phase
        self._percentage = percentage
        self._updates.append(accepted)
        logger.debug("progress [%s %d%%] %s", accepted.phase, accepted.percentage, accepted.message)

        for observer in list(self._observers):
            try:
                observer(accepted)
            except Exception:
                logger.exception("Progress observer failed; continuing run")
        return accepted

    def engine_callback(self) -> Callable[[Dict[str, Any]], None]:
        """Adapter for engines that report `{phase, message, progress?}` dicts."""
        def _on_progress(update: Dict[str, Any]) -> None:
            if not isinstance(update, Mapping):
                logger.warning("Ignoring malformed progress update: %r", update)
                return
            self.report(update.get("phase"), update.get("message", ""), update.get("progress"))
        return _on_progress


_DONE = object()


class ProgressStream:
    """
    Queue-backed observer that a caller drains while the run proceeds.
    Use `observer` as the run's progress sink, iterate `drain()`, and call
    `close()` once the run has finished.
    """

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue()

    def observer(self, update: ProgressUpdate) -> None:
        self._queue.put_nowait(update)

    def close(self) -> None:
        self._queue.put_nowait(_DONE)

    async def drain(self) -> AsyncIterator[ProgressUpdate]:
        while True:
            item = await self._queue.get()
            if item is _DONE:
                return
            yield item
