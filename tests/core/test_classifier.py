from __future__ import annotations

import pytest

from chatscroll.core.classifier import ScrollClassifier
from chatscroll.core.models import ListPhase, ScrollState, ViewportMetrics


@pytest.fixture
def classifier() -> ScrollClassifier:
    return ScrollClassifier(bottom_epsilon=50, top_threshold=200)


@pytest.mark.parametrize(
    ("offset", "visible", "content", "at_bottom"),
    [
        (0, 500, 400, True),  # content fits, nothing to scroll
        (1000, 500, 1550, True),  # 1500 >= 1500
        (900, 500, 1550, False),  # 1400 < 1500
        (1050, 500, 1550, True),
    ],
)
def test_at_bottom_with_tolerance(classifier, offset, visible, content, at_bottom):
    result = classifier.classify(ViewportMetrics(offset, visible, content))
    assert result.is_at_bottom is at_bottom


@pytest.mark.parametrize(("offset", "near_top"), [(0, True), (150, True), (199, True), (200, False)])
def test_near_top_threshold(classifier, offset, near_top):
    result = classifier.classify(ViewportMetrics(offset, 500, 5000))
    assert result.near_top is near_top


def test_thresholds_are_tunable():
    sticky = ScrollClassifier(bottom_epsilon=200, top_threshold=1000)
    result = sticky.classify(ViewportMetrics(900, 500, 1550))
    assert result.is_at_bottom
    assert result.near_top


def test_negative_and_garbage_metrics_are_clamped(classifier):
    result = classifier.classify(ViewportMetrics(-40, -10, -900))
    assert result.is_at_bottom
    assert result.near_top

    sanitized = ViewportMetrics.sanitized(float("nan"), "tall", None)
    assert sanitized == ViewportMetrics(0.0, 0.0, 0.0)


def test_update_writes_state_and_affordance(classifier):
    state = ScrollState()

    classifier.update(state, ViewportMetrics(900, 500, 1550))
    assert state.phase is ListPhase.REVIEWING
    assert state.show_jump_to_bottom

    classifier.update(state, ViewportMetrics(1000, 500, 1550))
    assert state.phase is ListPhase.LIVE
    assert not state.show_jump_to_bottom


def test_update_without_demote_only_promotes(classifier):
    state = ScrollState()

    classifier.update(state, ViewportMetrics(100, 500, 1550), allow_demote=False)
    assert state.is_at_bottom
    assert not state.show_jump_to_bottom

    state.is_at_bottom = False
    state.show_jump_to_bottom = True
    classifier.update(state, ViewportMetrics(1050, 500, 1550), allow_demote=False)
    assert state.is_at_bottom
    assert not state.show_jump_to_bottom
