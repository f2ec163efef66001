from __future__ import annotations

import asyncio
from collections.abc import Callable, Hashable, Sequence

import structlog

from chatscroll.core.annotator import MessageAnnotator
from chatscroll.core.autoscroll import AutoscrollController, Reposition, ViewportHost
from chatscroll.core.classifier import Classification, ScrollClassifier
from chatscroll.core.config import ScrollSettings, get_settings
from chatscroll.core.debounce import ScrollIntentDebouncer
from chatscroll.core.models import (
    AnnotatedMessage,
    ListPhase,
    Message,
    PaginationState,
    ScrollOrigin,
    ScrollState,
    ViewportMetrics,
)
from chatscroll.core.pagination import HistoryLoader, PaginationTrigger
from chatscroll.core.timers import LoopScheduler, Scheduler

logger = structlog.get_logger(__name__)


class ChatListController:
    """Scroll state for one chat list instance.

    All entry points are synchronous and finish every state write before
    returning, so events delivered through one event loop never interleave.
    The only deferred work is the debounce timer and the history loader
    task; both are neutralised by ``reset()`` (conversation switch) and
    ``close()`` (teardown).

    ``PaginationState`` belongs to the data layer and survives ``reset()``;
    feed it with ``set_pagination``.

    History loads run as tasks on the running event loop. A near-top
    ``handle_viewport`` with history to fetch raises ``ChatScrollError``
    when called outside one.
    """

    def __init__(
        self,
        host: ViewportHost,
        loader: HistoryLoader,
        *,
        settings: ScrollSettings | None = None,
        scheduler: Scheduler | None = None,
        on_change: Callable[[ScrollState], None] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.state = ScrollState()
        self.pagination = PaginationState()

        self._annotator = MessageAnnotator(
            timestamp_gap_seconds=self.settings.timestamp_gap_seconds
        )
        self._classifier = ScrollClassifier(
            bottom_epsilon=self.settings.bottom_epsilon,
            top_threshold=self.settings.top_threshold,
        )
        self._debouncer = ScrollIntentDebouncer(
            self.state,
            scheduler or LoopScheduler(),
            cooldown=self.settings.user_scroll_cooldown,
            on_settled=self._notify,
        )
        self._trigger = PaginationTrigger(loader, self.pagination)
        self._autoscroll = AutoscrollController(host)

        self._on_change = on_change
        self._messages: Sequence[Message] = ()
        self._conversation: Hashable | None = None
        self._last_snapshot = self.state.snapshot()
        self._last_phase = self.state.phase
        self._closed = False

    # --- accessors ---

    @property
    def phase(self) -> ListPhase:
        return self.state.phase

    @property
    def annotated(self) -> tuple[AnnotatedMessage, ...]:
        return self._annotator.current

    @property
    def pending_load(self) -> asyncio.Task[None] | None:
        return self._trigger.in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    # --- events ---

    def handle_viewport(
        self, metrics: ViewportMetrics, origin: ScrollOrigin = ScrollOrigin.USER
    ) -> Classification | None:
        if self._closed:
            logger.debug("viewport_event_ignored", reason="closed")
            return None

        result = self._classifier.update(
            self.state, metrics, allow_demote=origin is ScrollOrigin.USER
        )
        if origin is ScrollOrigin.USER:
            self._debouncer.arm()
        self._notify()
        self._trigger.maybe_trigger(result.near_top)
        return result

    def set_messages(
        self, messages: Sequence[Message], *, conversation: Hashable | None = None
    ) -> tuple[AnnotatedMessage, ...]:
        if self._closed:
            return self._annotator.current

        if self._is_switch(messages, conversation):
            logger.debug(
                "conversation_switched", previous=self._conversation, current=conversation
            )
            self.reset()
        if conversation is not None:
            self._conversation = conversation

        previous = self._messages
        annotated = self._annotator.annotate(messages)
        self._messages = messages
        if messages is not previous:
            self._autoscroll.on_messages(previous, messages, self.state)
        self._notify()
        return annotated

    def set_pagination(self, *, has_more: bool, loading: bool = False) -> None:
        self.pagination.has_more = has_more
        self.pagination.loading = loading

    def jump_to_bottom(self) -> Reposition:
        if self._closed:
            return Reposition.NONE
        self._debouncer.settle()
        self._classifier.enter_live(self.state)
        action = self._autoscroll.jump_to_bottom()
        self._notify()
        return action

    # --- lifecycle ---

    def reset(self) -> None:
        self._debouncer.settle()
        self._trigger.reset()
        self._annotator.clear()
        self._messages = ()
        self.state.reset()
        self._notify()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._debouncer.close()
        self._trigger.close()
        logger.debug("chat_list_closed", conversation=self._conversation)

    def __enter__(self) -> ChatListController:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- internals ---

    def _is_switch(
        self, messages: Sequence[Message], conversation: Hashable | None
    ) -> bool:
        if conversation is not None and self._conversation is not None:
            return conversation != self._conversation

        previous = self._messages
        if not previous or messages is previous:
            return False
        if len(messages) < len(previous):
            return True
        oldest = previous[0].id
        return all(message.id != oldest for message in messages)

    def _notify(self) -> None:
        phase = self.state.phase
        if phase is not self._last_phase:
            logger.debug("phase_changed", phase=phase.value)
            self._last_phase = phase

        snapshot = self.state.snapshot()
        if snapshot == self._last_snapshot:
            return
        self._last_snapshot = snapshot
        if self._on_change is not None:
            self._on_change(self.state)
