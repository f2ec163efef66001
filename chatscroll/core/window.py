from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(slots=True)
class _Slot:
    key: str
    height: int | None = None


class MessageWindow:
    """Decides which messages around the viewport are worth materializing.

    Heights are measured once a message has been rendered and estimated
    before that. Off-window content is represented by top/bottom spacer
    heights taken from a prefix-sum table, so the scrollable extent stays
    stable while only a small slice is mounted.
    """

    def __init__(self, *, buffer: int = 40, estimated_height: int = 3) -> None:
        self._slots: list[_Slot] = []
        self._buffer = max(0, buffer)
        self._estimated_height = max(1, estimated_height)

        self._prefix: list[int] = [0]
        self._prefix_dirty = False
        self._scroll_offset = 0
        self._visible_height = 0

    def __len__(self) -> int:
        return len(self._slots)

    @property
    def total_height(self) -> int:
        self._ensure_prefix()
        return self._prefix[-1]

    def reset(self, keys: Sequence[str]) -> None:
        """Replace the message keys, keeping measurements for keys that survive."""
        known = {slot.key: slot.height for slot in self._slots}
        self._slots = [_Slot(key=key, height=known.get(key)) for key in keys]
        self._prefix_dirty = True

    def append(self, key: str) -> None:
        self._slots.append(_Slot(key=key))
        # Keep prefix sums in sync incrementally; appends are the hot path.
        if not self._prefix_dirty and len(self._prefix) == len(self._slots):
            self._prefix.append(self._prefix[-1] + self._estimated_height)
        else:
            self._prefix_dirty = True

    def measure(self, index: int, height: int) -> bool:
        """Record a rendered height. Returns True if anything changed."""
        if index < 0 or index >= len(self._slots) or height <= 0:
            return False
        slot = self._slots[index]
        if slot.height == height:
            return False
        slot.height = height
        self._rebuild_prefix_from(index)
        return True

    def set_viewport(self, *, scroll_offset: int, visible_height: int) -> tuple[int, int]:
        self._scroll_offset = max(0, int(scroll_offset))
        self._visible_height = max(0, int(visible_height))
        return self.visible_range()

    def visible_range(self) -> tuple[int, int]:
        """Inclusive ``(start, end)`` index range; ``(0, -1)`` when empty."""
        if not self._slots:
            return (0, -1)

        self._ensure_prefix()

        y0 = max(0, self._scroll_offset - self._buffer)
        y1 = self._scroll_offset + self._visible_height + self._buffer

        start = max(0, bisect_right(self._prefix, y0) - 1)
        start = min(len(self._slots) - 1, start)
        end = max(0, bisect_right(self._prefix, y1) - 1)
        end = min(len(self._slots) - 1, end)
        return (start, end)

    def spacer_heights(self, start: int, end: int) -> tuple[int, int]:
        self._ensure_prefix()
        top = self._prefix[start] if 0 <= start <= len(self._slots) else 0
        bottom = 0
        if 0 <= end < len(self._slots):
            bottom = self._prefix[-1] - self._prefix[end + 1]
        return (max(0, top), max(0, bottom))

    def _height(self, slot: _Slot) -> int:
        return slot.height if slot.height is not None else self._estimated_height

    def _ensure_prefix(self) -> None:
        expected_len = len(self._slots) + 1
        if not self._prefix_dirty and len(self._prefix) == expected_len:
            return

        prefix = [0]
        total = 0
        for slot in self._slots:
            total += self._height(slot)
            prefix.append(total)
        self._prefix = prefix
        self._prefix_dirty = False

    def _rebuild_prefix_from(self, first_changed_index: int) -> None:
        if (
            first_changed_index <= 0
            or self._prefix_dirty
            or len(self._prefix) != len(self._slots) + 1
        ):
            self._prefix_dirty = True
            self._ensure_prefix()
            return

        total = self._prefix[first_changed_index]
        for idx in range(first_changed_index, len(self._slots)):
            total += self._height(self._slots[idx])
            self._prefix[idx + 1] = total
