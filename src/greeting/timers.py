"""
Timer manager for the greeting session lifecycle.

Owns the three session timers (session duration, cooldown, face-lost grace).
Expiry is never acted on from the timer thread: it is handed to `dispatch`
(the engine queue), and the callback only runs if the timer's generation is
still the current one for its kind. A timer that already fired but was
cancelled before its expiry was processed is therefore a no-op.
"""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

TIMER_SESSION_DURATION = "session_duration"
TIMER_COOLDOWN = "cooldown"
TIMER_FACE_LOST_GRACE = "face_lost_grace"

TIMER_KINDS = (TIMER_SESSION_DURATION, TIMER_COOLDOWN, TIMER_FACE_LOST_GRACE)

Dispatch = Callable[[Callable[[], None]], None]


def _run_inline(fn: Callable[[], None]) -> None:
    fn()


@dataclass
class _PendingTimer:
    generation: int
    handle: Any
    callback: Callable[[], None]


class TimerManager:
    """
    Schedules and cancels the session timers.

    At most one timer per kind is pending; scheduling a kind replaces the
    previous timer of that kind. All methods except the timer-thread hook
    are expected to run on the engine's processing thread.

    Example:
        timers = TimerManager(dispatch=engine.post)
        timers.schedule(TIMER_COOLDOWN, 30.0, on_cooldown_end)
        timers.cancel_all()
    """

    def __init__(
        self,
        dispatch: Optional[Dispatch] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        self._dispatch = dispatch or _run_inline
        self._timer_factory = timer_factory
        self._pending: Dict[str, _PendingTimer] = {}
        self._generation = 0

    def schedule(self, kind: str, duration_s: float, callback: Callable[[], None]) -> int:
        """
        Arm a timer of `kind`, cancelling any pending one of the same kind.

        Returns:
            The generation stamp of the new timer.
        """
        if kind not in TIMER_KINDS:
            raise ValueError(f"Unknown timer kind: {kind}")

        self.cancel(kind)
        self._generation += 1
        generation = self._generation

        handle = self._timer_factory(
            max(0.0, float(duration_s)),
            self._on_timer_thread,
            args=(kind, generation),
        )
        handle.daemon = True
        self._pending[kind] = _PendingTimer(generation, handle, callback)
        handle.start()
        logging.debug(f"Timer scheduled: {kind} in {duration_s:.1f}s (gen={generation})")
        return generation

    def cancel(self, kind: str) -> bool:
        """Cancel the pending timer of `kind`. Returns True if one was pending."""
        pending = self._pending.pop(kind, None)
        if pending is None:
            return False
        pending.handle.cancel()
        logging.debug(f"Timer cancelled: {kind} (gen={pending.generation})")
        return True

    def cancel_all(self) -> int:
        """Cancel every pending timer. Safe to call with nothing pending."""
        cancelled = 0
        for kind in TIMER_KINDS:
            if self.cancel(kind):
                cancelled += 1
        return cancelled

    def is_pending(self, kind: str) -> bool:
        return kind in self._pending

    def pending_kinds(self) -> List[str]:
        return [kind for kind in TIMER_KINDS if kind in self._pending]

    def generation_of(self, kind: str) -> Optional[int]:
        pending = self._pending.get(kind)
        return pending.generation if pending else None

    def expire(self, kind: str, generation: int) -> bool:
        """
        Run the callback for an expired timer if it is still current.

        Returns:
            True if the callback ran, False for a stale or cancelled timer.
        """
        pending = self._pending.get(kind)
        if pending is None or pending.generation != generation:
            logging.debug(f"Ignoring stale timer: {kind} (gen={generation})")
            return False

        del self._pending[kind]
        pending.callback()
        return True

    def _on_timer_thread(self, kind: str, generation: int) -> None:
        self._dispatch(functools.partial(self.expire, kind, generation))
