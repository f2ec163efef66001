from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol

from chatscroll.core.models import Message, ScrollState


class ViewportHost(Protocol):
    """What the engine needs from whatever actually scrolls.

    Scroll events caused by these two commands must be reported back with
    ``ScrollOrigin.PROGRAMMATIC``.
    """

    def scroll_to_bottom_instant(self) -> None: ...

    def scroll_to_bottom_smooth(self) -> None: ...


class Reposition(Enum):
    NONE = "none"
    INSTANT = "instant"
    SMOOTH = "smooth"


def has_new_tail(previous: Sequence[Message], current: Sequence[Message]) -> bool:
    if len(current) > len(previous):
        return True
    if not previous or not current:
        return False
    return current[-1] != previous[-1]


class AutoscrollController:
    """Decides whether arriving messages move the viewport to the newest one."""

    def __init__(self, host: ViewportHost) -> None:
        self._host = host

    def on_messages(
        self,
        previous: Sequence[Message],
        current: Sequence[Message],
        state: ScrollState,
    ) -> Reposition:
        if not current or not has_new_tail(previous, current):
            return Reposition.NONE

        if not state.is_at_bottom:
            # Reviewing: never yank the viewer away, just advertise new content.
            state.show_jump_to_bottom = True
            return Reposition.NONE

        if state.is_user_scrolling:
            return Reposition.NONE

        self._host.scroll_to_bottom_instant()
        return Reposition.INSTANT

    def jump_to_bottom(self) -> Reposition:
        self._host.scroll_to_bottom_smooth()
        return Reposition.SMOOTH
