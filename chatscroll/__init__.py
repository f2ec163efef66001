from __future__ import annotations

from chatscroll.core.controller import ChatListController
from chatscroll.core.models import (
    AnnotatedMessage,
    DeliveryStatus,
    ListPhase,
    MediaKind,
    Message,
    PaginationState,
    ScrollOrigin,
    ScrollState,
    ViewportMetrics,
)

__all__ = [
    "AnnotatedMessage",
    "ChatListController",
    "DeliveryStatus",
    "ListPhase",
    "MediaKind",
    "Message",
    "PaginationState",
    "ScrollOrigin",
    "ScrollState",
    "ViewportMetrics",
]

__version__ = "0.1.0"
