"""Headless host: plain Python elements with fixed geometry.

Used by the test suite and the trace CLI, and usable by any UI that keeps its
own element model (terminal UIs, game menus) and only needs the navigator to
pick the next element.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from spatial_nav.events import EventBus
from spatial_nav.geometry import Geometry

if TYPE_CHECKING:
    from spatial_nav.navigator import SpatialNavigator


@dataclass(eq=False)
class MemoryElement:
    element_id: str
    rect: Geometry = (0, 0, 0, 0)
    tag: str = "div"
    classes: frozenset = frozenset()
    attributes: Dict[str, str] = field(default_factory=dict)
    visible: bool = True
    disabled: bool = False
    attached: bool = True

    def __repr__(self) -> str:
        return f"<MemoryElement #{self.element_id}>"


class InMemoryHost:
    """Element store plus focus tracking and an :class:`EventBus`.

    Query syntax: comma separated alternatives of ``*``, ``#id``,
    ``.class`` or a bare tag name.
    """

    def __init__(self, *, bus: Optional[EventBus] = None, immediate_callbacks: bool = True) -> None:
        self.bus = bus or EventBus()
        self._elements: List[MemoryElement] = []
        self._focused: Optional[MemoryElement] = None
        self._navigator: Optional["SpatialNavigator"] = None
        self._immediate = immediate_callbacks
        self._pending: List[Callable[[], None]] = []
        self._deferring = False
        self.focus_calls: List[MemoryElement] = []
        self.blur_calls: List[MemoryElement] = []

    # Element store -------------------------------------------------------

    def add(
        self,
        element_id: str,
        rect: Geometry,
        *,
        classes: Iterable[str] = (),
        tag: str = "div",
        attributes: Optional[Mapping[str, str]] = None,
        visible: bool = True,
        disabled: bool = False,
    ) -> MemoryElement:
        element = MemoryElement(
            element_id=element_id,
            rect=tuple(rect),  # type: ignore[arg-type]
            tag=tag,
            classes=frozenset(classes),
            attributes=dict(attributes or {}),
            visible=visible,
            disabled=disabled,
        )
        self._elements.append(element)
        return element

    def get(self, element_id: str) -> Optional[MemoryElement]:
        for element in self._elements:
            if element.element_id == element_id:
                return element
        return None

    def __getitem__(self, element_id: str) -> MemoryElement:
        element = self.get(element_id)
        if element is None:
            raise KeyError(element_id)
        return element

    def detach_element(self, element: MemoryElement) -> None:
        element.attached = False
        if self._focused is element:
            self._focused = None

    @property
    def elements(self) -> List[MemoryElement]:
        return list(self._elements)

    @classmethod
    def from_layout(cls, layout: Mapping[str, Any]) -> "InMemoryHost":
        """Build a host from ``{"elements": [{"id", "rect", "classes", ...}]}``."""

        host = cls()
        for entry in layout.get("elements", []):
            rect = entry.get("rect") or (0, 0, 0, 0)
            host.add(
                str(entry["id"]),
                tuple(float(value) for value in rect),  # type: ignore[arg-type]
                classes=entry.get("classes") or (),
                tag=str(entry.get("tag", "div")),
                attributes={str(k): str(v) for k, v in (entry.get("attributes") or {}).items()},
                visible=bool(entry.get("visible", True)),
                disabled=bool(entry.get("disabled", False)),
            )
        return host

    # NavigationHost ------------------------------------------------------

    def measure(self, element: Any) -> Optional[Geometry]:
        if not isinstance(element, MemoryElement) or not element.attached:
            return None
        return element.rect

    def query(self, selector: str) -> Sequence[Any]:
        return [element for element in self._elements if element.attached and self.matches(element, selector)]

    def matches(self, element: Any, selector: str) -> bool:
        if not isinstance(element, MemoryElement):
            return False
        for token in (part.strip() for part in selector.split(",")):
            if not token:
                continue
            if token == "*":
                return True
            if token.startswith("#"):
                if element.element_id == token[1:]:
                    return True
            elif token.startswith("."):
                if token[1:] in element.classes:
                    return True
            elif token == element.tag:
                return True
        return False

    def is_visible(self, element: Any) -> bool:
        if not isinstance(element, MemoryElement) or not element.attached or not element.visible:
            return False
        _, _, width, height = element.rect
        return not (width <= 0 and height <= 0)

    def is_disabled(self, element: Any) -> bool:
        return bool(getattr(element, "disabled", False))

    def focus(self, element: Any) -> None:
        self.focus_calls.append(element)
        self._focused = element

    def blur(self, element: Any) -> None:
        self.blur_calls.append(element)
        if self._focused is element:
            self._focused = None

    def current_focus(self) -> Any:
        return self._focused

    def notify(self, element: Any, event: str, detail: Mapping[str, Any], cancelable: bool) -> bool:
        return self.bus.dispatch(element, event, detail, cancelable)

    def direction_override(self, element: Any, direction: str) -> Optional[str]:
        attributes = getattr(element, "attributes", None) or {}
        return attributes.get(f"data-sn-{direction}")

    def make_focusable(self, element: Any) -> None:
        if not element.attributes.get("tabindex"):
            element.attributes["tabindex"] = "-1"

    def call_soon(self, callback: Callable[[], None]) -> None:
        if self._immediate and not self._deferring:
            callback()
        else:
            self._pending.append(callback)

    def run_pending(self) -> int:
        pending, self._pending = self._pending, []
        for callback in pending:
            callback()
        return len(pending)

    def attach(self, navigator: "SpatialNavigator") -> None:
        self._navigator = navigator

    def detach(self) -> None:
        self._navigator = None

    @property
    def attached(self) -> bool:
        return self._navigator is not None

    # User simulation -----------------------------------------------------

    def user_focus(self, element: MemoryElement) -> None:
        """Focus ``element`` as a pointer click would, reporting it to the navigator."""

        previous = self._focused
        # Deferred callbacks (blur vetoes) run after the whole blur/focus pair, as in a UI event loop.
        self._deferring = True
        try:
            if previous is not None and previous is not element:
                self._focused = None
                if self._navigator is not None:
                    self._navigator.handle_native_blur(previous)
            self._focused = element
            if self._navigator is not None:
                self._navigator.handle_native_focus(element)
        finally:
            self._deferring = False
        if self._immediate:
            self.run_pending()

    def press(self, key: str, modifiers: Iterable[str] = ()) -> bool:
        """Deliver a key down/up pair to the attached navigator."""

        if self._navigator is None:
            return False
        consumed = self._navigator.handle_key_down(key, modifiers)
        self._navigator.handle_key_up(key, modifiers)
        return consumed
