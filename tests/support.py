"""Test doubles: a manual clock, a recording viewport host and a gated loader."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from chatscroll.core.models import Message


class ManualHandle:
    def __init__(self, deadline_ms: int, callback: Callable[[], None]) -> None:
        self.deadline_ms = deadline_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves when a test calls ``advance_ms``."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self.now_ms + round(delay * 1000), callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [handle for handle in self._handles if not handle.cancelled]

    def advance_ms(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            due = [handle for handle in self.pending if handle.deadline_ms <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.deadline_ms)
            self._handles.remove(handle)
            self.now_ms = handle.deadline_ms
            handle.callback()
        self.now_ms = target


@dataclass
class RecordingHost:
    calls: list[str] = field(default_factory=list)

    def scroll_to_bottom_instant(self) -> None:
        self.calls.append("instant")

    def scroll_to_bottom_smooth(self) -> None:
        self.calls.append("smooth")


class RecordingLoader:
    """History loader that blocks until the test calls ``release``."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self.error = error
        self._gates: list[asyncio.Event] = []

    async def __call__(self) -> None:
        self.calls += 1
        gate = asyncio.Event()
        self._gates.append(gate)
        await gate.wait()
        if self.error is not None:
            raise self.error

    def release(self) -> None:
        for gate in self._gates:
            gate.set()
        self._gates.clear()


BASE_TIME = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def make_messages(
    senders: str, *, start: int = 0, spacing: timedelta = timedelta(seconds=30)
) -> list[Message]:
    """Build messages from a sender pattern: ``"mmt"`` is me, me, them."""
    return [
        Message(
            id=f"m{start + idx}",
            content=f"message {start + idx}",
            from_me=sender == "m",
            created_at=BASE_TIME + spacing * (start + idx),
        )
        for idx, sender in enumerate(senders)
    ]
