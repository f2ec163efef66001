from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial

import structlog

from chatscroll.core.errors import ChatScrollError, HistoryLoadError
from chatscroll.core.models import PaginationState

logger = structlog.get_logger(__name__)

HistoryLoader = Callable[[], Awaitable[None]]


class PaginationTrigger:
    """Requests older history when the viewport nears the top.

    ``PaginationState.loading`` is owned by the data layer; this class only
    reads it. On top of that it keeps its own in-flight gate so a burst of
    near-top scroll ticks results in a single loader call even before the
    data layer has flipped ``loading``.
    """

    def __init__(self, loader: HistoryLoader, pagination: PaginationState) -> None:
        self._loader = loader
        self._pagination = pagination
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self._closed = False

    @property
    def in_flight(self) -> asyncio.Task[None] | None:
        return self._task

    def maybe_trigger(self, near_top: bool) -> asyncio.Task[None] | None:
        if self._closed or not near_top or self._task is not None:
            return None
        if not self._pagination.can_load:
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise ChatScrollError(
                "Loading older messages requires a running asyncio event loop"
            ) from exc

        generation = self._generation
        logger.debug("history_load_started", generation=generation)
        task = loop.create_task(self._load())
        self._task = task
        task.add_done_callback(partial(self._finished, generation))
        return task

    def reset(self) -> None:
        """Forget the current load; its completion will be discarded."""
        self._generation += 1
        self._task = None

    def close(self) -> None:
        self._closed = True
        self.reset()

    async def _load(self) -> None:
        try:
            await self._loader()
        except Exception as exc:
            raise HistoryLoadError() from exc

    def _finished(self, generation: int, task: asyncio.Task[None]) -> None:
        # Retrieve the exception here so asyncio does not report it as lost;
        # whoever awaits the task still gets it.
        error = None if task.cancelled() else task.exception()

        if self._closed or generation != self._generation:
            logger.debug("history_load_discarded", generation=generation)
            return

        self._task = None
        if error is not None:
            logger.warning(
                "history_load_failed",
                generation=generation,
                error=str(error.__cause__ or error),
            )
        elif task.cancelled():
            logger.debug("history_load_cancelled", generation=generation)
        else:
            logger.debug("history_load_finished", generation=generation)
