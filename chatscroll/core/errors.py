from __future__ import annotations


class ChatScrollError(Exception):
    """Base class for errors raised by the chat list engine."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class HistoryLoadError(ChatScrollError):
    """The external history loader failed.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str = "Loading older messages failed"):
        super().__init__(message)
