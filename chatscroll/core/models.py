from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DeliveryStatus(Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class MediaKind(Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


class ScrollOrigin(Enum):
    """Who caused a viewport event."""

    USER = "user"
    PROGRAMMATIC = "programmatic"
    RESIZE = "resize"


class ListPhase(Enum):
    LIVE = "live"
    REVIEWING = "reviewing"


@dataclass(frozen=True, slots=True)
class Message:
    """A chat message as supplied by the data layer. Newest last."""

    id: str
    content: str
    from_me: bool
    created_at: datetime
    status: DeliveryStatus = DeliveryStatus.SENT
    media_kind: MediaKind = MediaKind.TEXT
    media_url: str | None = None


@dataclass(frozen=True, slots=True)
class AnnotatedMessage:
    message: Message
    index: int
    is_first_of_run: bool
    is_last_of_run: bool
    show_timestamp: bool = False

    @property
    def id(self) -> str:
        return self.message.id

    @property
    def from_me(self) -> bool:
        return self.message.from_me


def _non_negative(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


@dataclass(frozen=True, slots=True)
class ViewportMetrics:
    scroll_offset: float
    visible_height: float
    content_height: float

    @classmethod
    def sanitized(
        cls, scroll_offset: object, visible_height: object, content_height: object
    ) -> ViewportMetrics:
        """Build metrics from untrusted host values.

        Negative, NaN, infinite and non-numeric values become zero.
        """
        return cls(
            scroll_offset=_non_negative(scroll_offset),
            visible_height=_non_negative(visible_height),
            content_height=_non_negative(content_height),
        )

    def clamped(self) -> ViewportMetrics:
        return ViewportMetrics.sanitized(
            self.scroll_offset, self.visible_height, self.content_height
        )


@dataclass(slots=True)
class ScrollState:
    is_at_bottom: bool = True
    is_user_scrolling: bool = False
    show_jump_to_bottom: bool = False

    @property
    def phase(self) -> ListPhase:
        return ListPhase.LIVE if self.is_at_bottom else ListPhase.REVIEWING

    def reset(self) -> None:
        self.is_at_bottom = True
        self.is_user_scrolling = False
        self.show_jump_to_bottom = False

    def snapshot(self) -> tuple[bool, bool, bool]:
        return (self.is_at_bottom, self.is_user_scrolling, self.show_jump_to_bottom)


@dataclass(slots=True)
class PaginationState:
    has_more: bool = False
    loading: bool = False

    @property
    def can_load(self) -> bool:
        return self.has_more and not self.loading
