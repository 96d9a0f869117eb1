"""Rect measurement, 3x3 partitioning and distance ranking for spatial navigation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

Geometry = Tuple[float, float, float, float]
MeasureFn = Callable[[Any], Optional[Geometry]]
DistanceFn = Callable[["Rect"], float]

_CORNER_GROUPS = (0, 2, 6, 8)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Bounding box of an element plus the center used for all distance math."""

    left: float
    top: float
    width: float
    height: float
    element: Any = field(default=None, compare=False)

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> Point:
        # Floor rounding is intentional; it decides ties between equal-sized neighbours.
        return Point(self.left + (self.width // 2), self.top + (self.height // 2))

    def center_rect(self) -> "Rect":
        """Return the center as a zero-size rect (reference for the internal pass)."""
        center = self.center
        return Rect(center.x, center.y, 0, 0, element=self.element)


@dataclass
class Priority:
    """A candidate tier and the distance chain that orders it."""

    group: List[Rect]
    distance: List[DistanceFn]


def compute_rect(element: Any, measure: MeasureFn) -> Optional[Rect]:
    """Measure ``element`` via the host; ``None`` when it cannot be measured."""

    if element is None:
        return None
    geometry = measure(element)
    if geometry is None:
        return None
    left, top, width, height = geometry
    return Rect(left, top, width, height, element=element)


def partition(
    rects: Sequence[Rect],
    target: Rect,
    straight_overlap_threshold: Optional[float],
) -> List[List[Rect]]:
    """Split ``rects`` into a 3x3 grid of groups around ``target``.

    Groups are numbered row-major: 0-2 above, 3-5 level with, 6-8 below the
    target. A candidate lands in a group by its center; corner candidates are
    copied into the adjacent straight group when their edge overlaps the
    target band by at least ``straight_overlap_threshold``. Passing ``None``
    disables those copies.
    """

    groups: List[List[Rect]] = [[] for _ in range(9)]
    for rect in rects:
        center = rect.center
        if center.x < target.left:
            column = 0
        elif center.x <= target.right:
            column = 1
        else:
            column = 2
        if center.y < target.top:
            row = 0
        elif center.y <= target.bottom:
            row = 1
        else:
            row = 2
        group_id = row * 3 + column
        groups[group_id].append(rect)

        if group_id not in _CORNER_GROUPS or straight_overlap_threshold is None:
            continue
        threshold = straight_overlap_threshold
        if rect.left <= target.right - target.width * threshold:
            if group_id == 2:
                groups[1].append(rect)
            elif group_id == 8:
                groups[7].append(rect)
        if rect.right >= target.left + target.width * threshold:
            if group_id == 0:
                groups[1].append(rect)
            elif group_id == 6:
                groups[7].append(rect)
        if rect.top <= target.bottom - target.height * threshold:
            if group_id == 6:
                groups[3].append(rect)
            elif group_id == 8:
                groups[5].append(rect)
        if rect.bottom >= target.top + target.height * threshold:
            if group_id == 0:
                groups[3].append(rect)
            elif group_id == 2:
                groups[5].append(rect)
    return groups


class DistanceFunctions:
    """Distance measures bound to a fixed target rect; smaller is always better."""

    def __init__(self, target: Rect) -> None:
        self.target = target

    def near_plumb_line_is_better(self, rect: Rect) -> float:
        target_x = self.target.center.x
        if rect.center.x < target_x:
            distance = target_x - rect.right
        else:
            distance = rect.left - target_x
        return max(0, distance)

    def near_horizon_is_better(self, rect: Rect) -> float:
        target_y = self.target.center.y
        if rect.center.y < target_y:
            distance = target_y - rect.bottom
        else:
            distance = rect.top - target_y
        return max(0, distance)

    def near_target_left_is_better(self, rect: Rect) -> float:
        if rect.center.x < self.target.center.x:
            distance = self.target.left - rect.right
        else:
            distance = rect.left - self.target.left
        return max(0, distance)

    def near_target_top_is_better(self, rect: Rect) -> float:
        if rect.center.y < self.target.center.y:
            distance = self.target.top - rect.bottom
        else:
            distance = rect.top - self.target.top
        return max(0, distance)

    @staticmethod
    def top_is_better(rect: Rect) -> float:
        return rect.top

    @staticmethod
    def bottom_is_better(rect: Rect) -> float:
        return -1 * rect.bottom

    @staticmethod
    def left_is_better(rect: Rect) -> float:
        return rect.left

    @staticmethod
    def right_is_better(rect: Rect) -> float:
        return -1 * rect.right


def _chain_key(distance: Sequence[DistanceFn]) -> Callable[[Rect], Tuple[float, ...]]:
    def _key(rect: Rect) -> Tuple[float, ...]:
        return tuple(fn(rect) for fn in distance)

    return _key


def prioritize(priorities: Sequence[Priority]) -> Optional[List[Rect]]:
    """Return the first non-empty tier sorted by its distance chain.

    Later tiers are never consulted once an earlier one has members, even if
    they hold a geometrically closer candidate. Ties fall back to the input
    order (``sorted`` is stable).
    """

    chosen: Optional[Priority] = None
    for priority in priorities:
        if priority.group:
            chosen = priority
            break
    if chosen is None:
        return None
    # Tuple comparison stops at the first unequal member, matching a
    # function-by-function tie-break.
    return sorted(chosen.group, key=_chain_key(chosen.distance))
