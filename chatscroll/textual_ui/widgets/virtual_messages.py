from __future__ import annotations

from collections.abc import Sequence

from textual.app import ComposeResult
from textual.message import Message as TextualMessage
from textual.widget import Widget
from textual.widgets import Static

from chatscroll.core.models import AnnotatedMessage, DeliveryStatus, MediaKind
from chatscroll.core.window import MessageWindow

_MEDIA_LABELS = {
    MediaKind.IMAGE: "[image]",
    MediaKind.VIDEO: "[video]",
    MediaKind.AUDIO: "[audio]",
    MediaKind.DOCUMENT: "[document]",
}


def _bubble_text(annotated: AnnotatedMessage) -> str:
    message = annotated.message
    lines: list[str] = []
    label = _MEDIA_LABELS.get(message.media_kind)
    if label:
        lines.append(label)
    if message.content:
        lines.append(message.content)

    footer: list[str] = []
    if annotated.show_timestamp:
        footer.append(message.created_at.strftime("%H:%M"))
    if message.from_me:
        footer.append("✓✓" if message.status is DeliveryStatus.READ else "✓")
    if footer:
        lines.append(" ".join(footer))
    return "\n".join(lines)


class MessageBubble(Static):
    """One rendered message. Run position is exposed as CSS classes."""

    DEFAULT_CSS = """
    MessageBubble {
        width: auto;
        max-width: 80%;
        padding: 0 1;
    }

    MessageBubble.from-me {
        margin-left: 4;
    }

    MessageBubble.run-last {
        padding-bottom: 1;
    }
    """

    def __init__(self, annotated: AnnotatedMessage) -> None:
        super().__init__(_bubble_text(annotated), markup=False)
        self.annotated = annotated
        self._apply_classes()

    def update_annotation(self, annotated: AnnotatedMessage) -> None:
        if annotated == self.annotated:
            return
        self.annotated = annotated
        self.update(_bubble_text(annotated))
        self._apply_classes()

    def _apply_classes(self) -> None:
        self.set_class(self.annotated.from_me, "from-me")
        self.set_class(self.annotated.is_first_of_run, "run-first")
        self.set_class(self.annotated.is_last_of_run, "run-last")


class VirtualMessages(Widget):
    """A message container that virtualizes message bubbles.

    Every annotated message gets a bubble, but only the window around the
    viewport stays mounted. Off-screen content is represented by top/bottom
    spacers sized by ``MessageWindow``.
    """

    class HeightsChanged(TextualMessage):
        """Measured bubble heights differ from what the window assumed."""

    DEFAULT_CSS = """
    VirtualMessages {
        layout: vertical;
        width: 100%;
        height: auto;
    }

    VirtualMessages > #vm-top,
    VirtualMessages > #vm-bottom {
        width: 100%;
        height: 0;
        padding: 0;
        margin: 0;
    }
    """

    def __init__(
        self, *, buffer_lines: int = 40, default_estimated_height: int = 3, **kwargs
    ):
        super().__init__(**kwargs)
        self._window = MessageWindow(
            buffer=buffer_lines, estimated_height=default_estimated_height
        )
        self._keys: list[str] = []
        self._bubbles: dict[str, MessageBubble] = {}

        self._top_spacer: Static | None = None
        self._bottom_spacer: Static | None = None

        self._range_start: int = 0
        self._range_end: int = -1

        self._measure_scheduled = False
        self._rebuild_scheduled = False

    def compose(self) -> ComposeResult:
        self._top_spacer = Static("", id="vm-top")
        self._bottom_spacer = Static("", id="vm-bottom")
        yield self._top_spacer
        yield self._bottom_spacer

    # --- public API ---

    @property
    def mounted_keys(self) -> list[str]:
        return [
            child.annotated.id
            for child in self.children
            if isinstance(child, MessageBubble)
        ]

    def set_messages(self, annotated: Sequence[AnnotatedMessage]) -> None:
        keys = [item.id for item in annotated]
        wanted = set(keys)

        for key in [key for key in self._bubbles if key not in wanted]:
            bubble = self._bubbles.pop(key)
            if bubble.is_attached:
                bubble.remove()

        for item in annotated:
            bubble = self._bubbles.get(item.id)
            if bubble is None:
                self._bubbles[item.id] = MessageBubble(item)
            else:
                bubble.update_annotation(item)

        if keys[: len(self._keys)] == self._keys:
            for key in keys[len(self._keys) :]:
                self._window.append(key)
        else:
            self._window.reset(keys)
        self._keys = keys

        self._update_visible_window(force=True)

    def set_viewport(self, *, relative_scroll_y: int, viewport_height: int) -> None:
        self._window.set_viewport(
            scroll_offset=relative_scroll_y, visible_height=viewport_height
        )
        self._update_visible_window()

    # --- virtualization ---

    def _update_visible_window(self, *, force: bool = False) -> None:
        if self._top_spacer is None or self._bottom_spacer is None:
            return

        start, end = self._window.visible_range()
        if not force and start == self._range_start and end == self._range_end:
            return

        self._range_start, self._range_end = start, end
        self._update_spacers(start, end)
        self._schedule_rebuild_visible()

    def _update_spacers(self, start: int, end: int) -> None:
        if self._top_spacer is None or self._bottom_spacer is None:
            return

        top_height, bottom_height = self._window.spacer_heights(start, end)
        if end < start:
            top_height, bottom_height = 0, 0

        self._top_spacer.display = top_height > 0
        self._bottom_spacer.display = bottom_height > 0

        self._top_spacer.styles.height = top_height
        self._bottom_spacer.styles.height = bottom_height

    def _schedule_rebuild_visible(self) -> None:
        if self._rebuild_scheduled:
            return
        self._rebuild_scheduled = True

        def kick() -> None:
            self._rebuild_scheduled = False
            self.run_worker(self._rebuild_visible_children_async(), exclusive=False)

        self.call_after_refresh(kick)

    async def _rebuild_visible_children_async(self) -> None:
        if self._top_spacer is None or self._bottom_spacer is None:
            return
        if not self._bottom_spacer.is_attached:
            return

        desired_indices = (
            range(self._range_start, self._range_end + 1)
            if self._range_end >= self._range_start
            else range(0)
        )
        desired_widgets = [
            self._bubbles[self._keys[i]]
            for i in desired_indices
            if i < len(self._keys) and self._keys[i] in self._bubbles
        ]
        desired_set = set(desired_widgets)

        for child in self._message_children():
            if child not in desired_set:
                await child.remove()

        if not desired_widgets:
            self._schedule_measure()
            return

        current_set = set(self._message_children())
        for idx, widget in enumerate(desired_widgets):
            if widget in current_set:
                continue

            before_widget: Widget | None = None
            for next_widget in desired_widgets[idx + 1 :]:
                if next_widget in current_set:
                    before_widget = next_widget
                    break

            await self.mount(widget, before=before_widget or self._bottom_spacer)
            current_set.add(widget)

        self._schedule_measure()

    def _message_children(self) -> list[Widget]:
        return [
            child
            for child in list(self.children)
            if child is not self._top_spacer and child is not self._bottom_spacer
        ]

    def _schedule_measure(self) -> None:
        if self._measure_scheduled:
            return
        self._measure_scheduled = True
        self.call_after_refresh(self._measure_visible)

    def _measure_visible(self) -> None:
        self._measure_scheduled = False
        if self._top_spacer is None or self._bottom_spacer is None:
            return

        changed = False
        for idx in range(self._range_start, self._range_end + 1):
            if idx < 0 or idx >= len(self._keys):
                continue
            bubble = self._bubbles.get(self._keys[idx])
            if bubble is None or not bubble.is_attached:
                continue
            changed |= self._window.measure(idx, int(bubble.size.height))

        if changed:
            self._update_spacers(self._range_start, self._range_end)
            self.post_message(self.HeightsChanged())
