"""
Completion coalescing.

Completions that arrive within a configured window are buffered and delivered
together when a single one-shot timer fires.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..collaborators import LoopTimer, Timer, TimerHandle

logger = logging.getLogger(__name__)


class Coalescer:
    """
    Batches completion callbacks into one flush per window.

    With `duration=None` every completion runs immediately. The queue and timer
    belong to one `Coalescer` (the dispatcher owns one per instance).
    """

    def __init__(self, duration: float | None, *, timer: Timer | None = None) -> None:
        self._duration = duration
        self._timer: Timer = timer or LoopTimer()
        self._queue: list[Callable[[], None]] = []
        self._handle: TimerHandle | None = None

    @property
    def duration(self) -> float | None:
        return self._duration

    @property
    def queued(self) -> int:
        return len(self._queue)

    def enqueue(self, completion: Callable[[], None]) -> None:
        if self._duration is None:
            completion()
            return

        self._queue.append(completion)
        if self._handle is None:
            self._handle = self._timer.after(self._duration, self._flush)

    def _flush(self) -> None:
        queue, self._queue = self._queue, []
        self._handle = None
        logger.debug("Flushing %d coalesced completion(s)", len(queue))
        for completion in queue:
            try:
                completion()
            except Exception:
                logger.warning("Coalesced completion raised", exc_info=True)
