from __future__ import annotations

import pytest

from spatial_nav.config import Direction, NavConfig
from spatial_nav.memory_host import InMemoryHost
from spatial_nav.resolver import PreviousMove, navigate


@pytest.fixture
def layout():
    host = InMemoryHost()
    origin = host.add("origin", (0, 0, 100, 100))
    straight = host.add("straight", (300, 0, 100, 100))
    oblique = host.add("oblique", (110, 110, 50, 50))
    return host, origin, straight, oblique


def test_straight_candidate_beats_nearer_oblique_one(layout) -> None:
    host, origin, straight, oblique = layout

    target = navigate(origin, "right", [straight, oblique], NavConfig(), host.measure)

    assert target is straight


def test_internal_candidate_beats_straight_one(layout) -> None:
    host, origin, straight, oblique = layout
    inner = host.add("inner", (60, 10, 30, 30))

    target = navigate(origin, Direction.RIGHT, [straight, oblique, inner], NavConfig(), host.measure)

    assert target is inner


def test_oblique_candidate_used_when_no_straight_one(layout) -> None:
    host, origin, _straight, oblique = layout

    assert navigate(origin, "right", [oblique], NavConfig(), host.measure) is oblique


def test_straight_only_never_returns_oblique_candidate(layout) -> None:
    host, origin, _straight, oblique = layout

    assert navigate(origin, "right", [oblique], NavConfig(straight_only=True), host.measure) is None


def test_down_prefers_same_column_over_same_row() -> None:
    host = InMemoryHost()
    a = host.add("a", (80, 80, 40, 40))
    b = host.add("b", (80, 280, 40, 40))
    c = host.add("c", (280, 80, 40, 40))

    assert navigate(a, "down", [c, b], NavConfig(), host.measure) is b


def test_invalid_inputs_return_none(layout) -> None:
    host, origin, straight, _oblique = layout

    assert navigate(origin, "sideways", [straight], NavConfig(), host.measure) is None
    assert navigate(None, "right", [straight], NavConfig(), host.measure) is None
    assert navigate(origin, "right", [], NavConfig(), host.measure) is None
    host.detach_element(straight)
    assert navigate(origin, "right", [straight], NavConfig(), host.measure) is None


def test_remember_source_returns_to_previous_element() -> None:
    host = InMemoryHost()
    source = host.add("source", (0, 0, 100, 100))
    closer = host.add("closer", (100, 50, 80, 100))
    here = host.add("here", (200, 0, 100, 100))
    previous = PreviousMove(target=source, destination=here, reverse=Direction.LEFT)

    plain = navigate(here, "left", [source, closer], NavConfig(), host.measure, previous=previous)
    remembered = navigate(
        here, "left", [source, closer], NavConfig(remember_source=True), host.measure, previous=previous
    )

    assert plain is closer
    assert remembered is source


def test_remember_source_ignored_for_other_directions() -> None:
    host = InMemoryHost()
    source = host.add("source", (0, 0, 100, 100))
    closer = host.add("closer", (100, 50, 80, 100))
    here = host.add("here", (200, 0, 100, 100))
    previous = PreviousMove(target=source, destination=here, reverse=Direction.RIGHT)

    target = navigate(here, "left", [source, closer], NavConfig(remember_source=True), host.measure, previous=previous)

    assert target is closer
