"""The capabilities a UI toolkit provides to the navigator."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Protocol, Sequence

from spatial_nav.geometry import Geometry

if TYPE_CHECKING:
    from spatial_nav.navigator import SpatialNavigator


class NavigationHost(Protocol):
    """Protocol implemented by :class:`InMemoryHost` and :class:`QtHost`."""

    def measure(self, element: Any) -> Optional[Geometry]:
        """Return ``(left, top, width, height)`` or ``None`` when detached."""
        ...

    def query(self, selector: str) -> Sequence[Any]:
        ...

    def matches(self, element: Any, selector: str) -> bool:
        ...

    def is_visible(self, element: Any) -> bool:
        ...

    def is_disabled(self, element: Any) -> bool:
        ...

    def focus(self, element: Any) -> None:
        ...

    def blur(self, element: Any) -> None:
        ...

    def current_focus(self) -> Any:
        ...

    def notify(self, element: Any, event: str, detail: Mapping[str, Any], cancelable: bool) -> bool:
        """Dispatch a lifecycle event; ``False`` when a listener vetoed it."""
        ...

    def direction_override(self, element: Any, direction: str) -> Optional[str]:
        """Per-element escape selector for ``direction``; ``None`` when unset."""
        ...

    def make_focusable(self, element: Any) -> None:
        ...

    def call_soon(self, callback: Callable[[], None]) -> None:
        ...

    def attach(self, navigator: "SpatialNavigator") -> None:
        ...

    def detach(self) -> None:
        ...
