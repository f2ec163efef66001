from __future__ import annotations

from collections.abc import Callable

from chatscroll.core.models import ScrollState
from chatscroll.core.timers import Scheduler, TimerHandle


class ScrollIntentDebouncer:
    """Keeps ``is_user_scrolling`` raised until scrolling has been quiet for a while.

    Every viewer scroll raises the flag and restarts the cooldown (trailing
    edge). Only the flag is debounced; classification still sees every event.
    """

    def __init__(
        self,
        state: ScrollState,
        scheduler: Scheduler,
        *,
        cooldown: float = 2.0,
        on_settled: Callable[[], None] | None = None,
    ) -> None:
        self._state = state
        self._scheduler = scheduler
        self._cooldown = cooldown
        self._on_settled = on_settled
        self._timer: TimerHandle | None = None
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def arm(self) -> None:
        if self._closed:
            return
        self._state.is_user_scrolling = True
        self._cancel_timer()
        self._timer = self._scheduler.call_later(self._cooldown, self._expire)

    def settle(self) -> None:
        """Drop the flag now, without waiting for the cooldown."""
        self._cancel_timer()
        self._state.is_user_scrolling = False

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _expire(self) -> None:
        self._timer = None
        if self._closed:
            return
        self._state.is_user_scrolling = False
        if self._on_settled is not None:
            self._on_settled()
