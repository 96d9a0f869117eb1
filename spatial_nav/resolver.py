"""Pick the next element in a direction from a candidate set."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from spatial_nav.config import Direction, NavConfig
from spatial_nav.geometry import DistanceFunctions, MeasureFn, Priority, Rect, compute_rect, partition, prioritize

_LOGGER = logging.getLogger("SpatialNav.Core")


@dataclass(frozen=True)
class PreviousMove:
    """The last successful move out of a section, kept for ``remember_source``."""

    target: Any
    destination: Any
    reverse: Direction


def _build_priorities(
    direction: Direction,
    groups: List[List[Rect]],
    internal_groups: List[List[Rect]],
    distance: DistanceFunctions,
) -> List[Priority]:
    if direction is Direction.LEFT:
        straight = [distance.near_plumb_line_is_better, distance.top_is_better]
        return [
            Priority(internal_groups[0] + internal_groups[3] + internal_groups[6], straight),
            Priority(groups[3], straight),
            Priority(
                groups[0] + groups[6],
                [distance.near_horizon_is_better, distance.right_is_better, distance.near_target_top_is_better],
            ),
        ]
    if direction is Direction.RIGHT:
        straight = [distance.near_plumb_line_is_better, distance.top_is_better]
        return [
            Priority(internal_groups[2] + internal_groups[5] + internal_groups[8], straight),
            Priority(groups[5], straight),
            Priority(
                groups[2] + groups[8],
                [distance.near_horizon_is_better, distance.left_is_better, distance.near_target_top_is_better],
            ),
        ]
    if direction is Direction.UP:
        straight = [distance.near_horizon_is_better, distance.left_is_better]
        return [
            Priority(internal_groups[0] + internal_groups[1] + internal_groups[2], straight),
            Priority(groups[1], straight),
            Priority(
                groups[0] + groups[2],
                [distance.near_plumb_line_is_better, distance.bottom_is_better, distance.near_target_left_is_better],
            ),
        ]
    straight = [distance.near_horizon_is_better, distance.left_is_better]
    return [
        Priority(internal_groups[6] + internal_groups[7] + internal_groups[8], straight),
        Priority(groups[7], straight),
        Priority(
            groups[6] + groups[8],
            [distance.near_plumb_line_is_better, distance.top_is_better, distance.near_target_left_is_better],
        ),
    ]


def navigate(
    origin: Any,
    direction: Any,
    candidates: Sequence[Any],
    config: NavConfig,
    measure: MeasureFn,
    *,
    previous: Optional[PreviousMove] = None,
) -> Any:
    """Return the best candidate to move to from ``origin``, or ``None``.

    Candidates in the origin's own band (overlapping it) come first, then the
    straight neighbours, then the oblique ones unless ``straight_only`` is
    set. With ``remember_source`` the element we arrived from wins back the
    reverse move whenever it is still in the winning tier.
    """

    resolved_direction = Direction.coerce(direction)
    if origin is None or resolved_direction is None or not candidates:
        return None

    rects = [rect for rect in (compute_rect(candidate, measure) for candidate in candidates) if rect is not None]
    if not rects:
        return None
    origin_rect = compute_rect(origin, measure)
    if origin_rect is None:
        return None

    threshold = config.straight_overlap_threshold
    groups = partition(rects, origin_rect, threshold)
    internal_groups = partition(groups[4], origin_rect.center_rect(), None)
    priorities = _build_priorities(resolved_direction, groups, internal_groups, DistanceFunctions(origin_rect))
    if config.straight_only:
        priorities.pop()

    ranked = prioritize(priorities)
    if not ranked:
        return None

    if (
        config.remember_source
        and previous is not None
        and previous.destination is origin
        and previous.reverse == resolved_direction
    ):
        for rect in ranked:
            if rect.element is previous.target:
                _LOGGER.debug("Remembered source %r wins %s move", rect.element, resolved_direction.value)
                return rect.element
    return ranked[0].element
