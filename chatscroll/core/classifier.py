from __future__ import annotations

from dataclasses import dataclass

from chatscroll.core.models import ScrollState, ViewportMetrics


@dataclass(frozen=True, slots=True)
class Classification:
    is_at_bottom: bool
    near_top: bool


class ScrollClassifier:
    """Turns raw viewport metrics into the at-bottom and near-top signals.

    Runs on every scroll tick, so it clamps its input and never raises.
    """

    def __init__(self, *, bottom_epsilon: float = 50, top_threshold: float = 200):
        self.bottom_epsilon = bottom_epsilon
        self.top_threshold = top_threshold

    def classify(self, metrics: ViewportMetrics) -> Classification:
        metrics = metrics.clamped()
        bottom_edge = metrics.scroll_offset + metrics.visible_height
        return Classification(
            is_at_bottom=bottom_edge >= metrics.content_height - self.bottom_epsilon,
            near_top=metrics.scroll_offset < self.top_threshold,
        )

    def update(
        self, state: ScrollState, metrics: ViewportMetrics, *, allow_demote: bool = True
    ) -> Classification:
        """Classify ``metrics`` and write the result into ``state``.

        With ``allow_demote`` false the list can move to Live but not leave
        it; used for events the engine or the host caused itself.
        """
        result = self.classify(metrics)
        if result.is_at_bottom or allow_demote:
            state.is_at_bottom = result.is_at_bottom
            state.show_jump_to_bottom = not result.is_at_bottom
        return result

    @staticmethod
    def enter_live(state: ScrollState) -> None:
        state.is_at_bottom = True
        state.show_jump_to_bottom = False
