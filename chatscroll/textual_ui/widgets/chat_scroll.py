from __future__ import annotations

from collections.abc import Hashable, Sequence

from textual import events
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.message import Message as TextualMessage
from textual.scrollbar import ScrollDown, ScrollTo, ScrollUp
from textual.widgets import Static

from chatscroll.core.config import ScrollSettings, get_settings
from chatscroll.core.controller import ChatListController
from chatscroll.core.models import Message, ScrollOrigin, ScrollState, ViewportMetrics
from chatscroll.core.pagination import HistoryLoader
from chatscroll.textual_ui.widgets.virtual_messages import VirtualMessages


class ChatScroll(VerticalScroll):
    """VerticalScroll that feeds every position change into a ChatListController.

    It is the controller's viewport host. Position changes are tagged by
    what caused them: viewer input (wheel, keys, scrollbar) is USER, the
    controller's own repositioning is PROGRAMMATIC, and anything else
    (layout settling, content shrinking under the viewport) is RESIZE.
    """

    BINDINGS = [("end", "jump_to_bottom", "Jump to latest")]

    DEFAULT_CSS = """
    ChatScroll > #history-status {
        width: 100%;
        height: 1;
        content-align: center middle;
        color: $text-muted;
    }
    """

    class JumpAffordanceChanged(TextualMessage):
        """The "jump to bottom" affordance should be shown or hidden."""

        def __init__(self, visible: bool) -> None:
            super().__init__()
            self.visible = visible

    def __init__(
        self,
        *children,
        loader: HistoryLoader,
        settings: ScrollSettings | None = None,
        **kwargs,
    ) -> None:
        super().__init__(*children, **kwargs)
        self._loader = loader
        self._settings = settings or get_settings()
        self._controller: ChatListController | None = None
        # Source of the scroll currently in progress; None means layout.
        self._origin: ScrollOrigin | None = None
        self._affordance_visible = False
        self._status_text = ""

    @property
    def controller(self) -> ChatListController:
        if self._controller is None:
            raise RuntimeError("ChatScroll is not mounted")
        return self._controller

    def compose(self) -> ComposeResult:
        yield Static("", id="history-status", markup=False)
        yield VirtualMessages(
            buffer_lines=self._settings.window_buffer,
            default_estimated_height=self._settings.estimated_message_height,
        )

    def on_mount(self) -> None:
        self._controller = ChatListController(
            self,
            self._loader,
            settings=self._settings.in_lines(),
            on_change=self._on_state_change,
        )
        self.query_one("#history-status", Static).display = False

    def on_unmount(self) -> None:
        if self._controller is not None:
            self._controller.close()

    # --- data in ---

    def show_messages(
        self,
        messages: Sequence[Message],
        *,
        has_more: bool,
        loading: bool = False,
        conversation: Hashable | None = None,
    ) -> None:
        controller = self.controller
        controller.set_pagination(has_more=has_more, loading=loading)
        annotated = controller.set_messages(messages, conversation=conversation)
        self.query_one(VirtualMessages).set_messages(annotated)
        self._update_history_status(has_more=has_more, loading=loading, empty=not messages)

    @property
    def history_status(self) -> str:
        """Text of the status line above the messages; empty when hidden."""
        return self._status_text

    def _update_history_status(self, *, has_more: bool, loading: bool, empty: bool) -> None:
        if loading:
            text = "Loading older messages…"
        elif empty:
            text = "No messages in this conversation"
        elif not has_more:
            text = "Beginning of conversation"
        else:
            text = ""
        self._status_text = text
        status = self.query_one("#history-status", Static)
        status.update(text)
        status.display = bool(text)

    # --- viewport host ---

    def viewport_metrics(self) -> ViewportMetrics:
        return ViewportMetrics.sanitized(
            self.scroll_y,
            self.scrollable_content_region.height,
            self.virtual_size.height,
        )

    def scroll_to_bottom_instant(self) -> None:
        # New bubbles are laid out on the next refresh; scroll after that.
        self.call_after_refresh(self._scroll_to_bottom, False)

    def scroll_to_bottom_smooth(self) -> None:
        self._scroll_to_bottom(True)

    def action_jump_to_bottom(self) -> None:
        self.controller.jump_to_bottom()

    def _scroll_to_bottom(self, animate: bool) -> None:
        # Textual skips on_complete when there is nowhere to go.
        if self.scroll_y >= self.max_scroll_y:
            return
        self._origin = ScrollOrigin.PROGRAMMATIC
        self.scroll_end(animate=animate, immediate=True, on_complete=self._end_programmatic)

    def _end_programmatic(self) -> None:
        if self._origin is ScrollOrigin.PROGRAMMATIC:
            self._origin = None

    # --- viewer input ---

    def _mark_user(self) -> None:
        self._origin = ScrollOrigin.USER

    def _on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self._mark_user()
        super()._on_mouse_scroll_up(event)

    def _on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self._mark_user()
        super()._on_mouse_scroll_down(event)

    def _on_scroll_to(self, message: ScrollTo) -> None:
        self._mark_user()
        super()._on_scroll_to(message)

    def _on_scroll_up(self, event: ScrollUp) -> None:
        self._mark_user()
        super()._on_scroll_up(event)

    def _on_scroll_down(self, event: ScrollDown) -> None:
        self._mark_user()
        super()._on_scroll_down(event)

    def action_scroll_up(self) -> None:
        self._mark_user()
        super().action_scroll_up()

    def action_scroll_down(self) -> None:
        self._mark_user()
        super().action_scroll_down()

    def action_page_up(self) -> None:
        self._mark_user()
        super().action_page_up()

    def action_page_down(self) -> None:
        self._mark_user()
        super().action_page_down()

    def action_scroll_home(self) -> None:
        self._mark_user()
        super().action_scroll_home()

    # --- viewport events out ---

    def watch_scroll_y(self, old_value: float, new_value: float) -> None:
        super().watch_scroll_y(old_value, new_value)
        if round(old_value) != round(new_value):
            self._notify_controller(self._origin or ScrollOrigin.RESIZE)

    def on_resize(self) -> None:
        self._notify_controller(ScrollOrigin.RESIZE)

    def _notify_controller(self, origin: ScrollOrigin) -> None:
        if self._controller is None:
            return
        metrics = self.viewport_metrics()
        self._controller.handle_viewport(metrics, origin)

        messages = self.query(VirtualMessages)
        if messages:
            container = messages.first()
            container.set_viewport(
                relative_scroll_y=int(metrics.scroll_offset) - container.virtual_region.y,
                viewport_height=int(metrics.visible_height),
            )

    def on_virtual_messages_heights_changed(
        self, message: VirtualMessages.HeightsChanged
    ) -> None:
        # Measured heights moved the bottom; stay pinned while Live.
        message.stop()
        controller = self._controller
        if controller is None or controller.closed:
            return
        state = controller.state
        if state.is_at_bottom and not state.is_user_scrolling:
            self.scroll_to_bottom_instant()

    def _on_state_change(self, state: ScrollState) -> None:
        if self._origin is ScrollOrigin.USER and not state.is_user_scrolling:
            # The debounced gesture is over.
            self._origin = None
        if state.show_jump_to_bottom != self._affordance_visible:
            self._affordance_visible = state.show_jump_to_bottom
            self.post_message(self.JumpAffordanceChanged(state.show_jump_to_bottom))
