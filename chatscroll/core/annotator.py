from __future__ import annotations

from collections.abc import Sequence

from chatscroll.core.models import AnnotatedMessage, Message


def annotate_messages(
    messages: Sequence[Message], *, timestamp_gap_seconds: float = 300
) -> tuple[AnnotatedMessage, ...]:
    """Derive run boundaries and timestamp visibility in one forward pass."""
    last = len(messages) - 1
    annotated: list[AnnotatedMessage] = []
    for idx, message in enumerate(messages):
        previous = messages[idx - 1] if idx > 0 else None
        following = messages[idx + 1] if idx < last else None

        show_timestamp = previous is None or (
            (message.created_at - previous.created_at).total_seconds()
            > timestamp_gap_seconds
        )
        annotated.append(
            AnnotatedMessage(
                message=message,
                index=idx,
                is_first_of_run=previous is None or previous.from_me != message.from_me,
                is_last_of_run=following is None
                or following.from_me != message.from_me,
                show_timestamp=show_timestamp,
            )
        )
    return tuple(annotated)


class MessageAnnotator:
    """Memoizes ``annotate_messages`` on the identity of the input sequence.

    Passing the same sequence object again returns the same tuple without
    walking it. Any new sequence object (even an equal one) recomputes.
    """

    def __init__(self, *, timestamp_gap_seconds: float = 300) -> None:
        self._timestamp_gap_seconds = timestamp_gap_seconds
        self._source: Sequence[Message] | None = None
        self._annotated: tuple[AnnotatedMessage, ...] = ()
        self.computations = 0

    @property
    def current(self) -> tuple[AnnotatedMessage, ...]:
        return self._annotated

    def annotate(self, messages: Sequence[Message]) -> tuple[AnnotatedMessage, ...]:
        if messages is self._source:
            return self._annotated

        self._annotated = annotate_messages(
            messages, timestamp_gap_seconds=self._timestamp_gap_seconds
        )
        self._source = messages
        self.computations += 1
        return self._annotated

    def clear(self) -> None:
        self._source = None
        self._annotated = ()
