"""PyQt6 host: navigate between real widgets of a window.

Selectors understood by :class:`QtHost`:

- ``#name`` matches ``objectName()``
- ``.cls`` matches a widget whose dynamic ``navClass`` property lists ``cls``
- ``QPushButton`` (any bare word) matches widgets inheriting that Qt class
- ``*`` matches every widget under the root

Per-widget direction overrides come from the dynamic properties
``sn-left``, ``sn-right``, ``sn-up`` and ``sn-down``.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Sequence

from PyQt6.QtCore import QEvent, QObject, QPoint, Qt, QTimer
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import QApplication, QWidget

from spatial_nav.events import EventBus
from spatial_nav.geometry import Geometry

if TYPE_CHECKING:
    from spatial_nav.navigator import SpatialNavigator

_LOGGER = logging.getLogger("SpatialNav.Qt")

NAV_CLASS_PROPERTY = "navClass"

_KEY_NAMES = {
    Qt.Key.Key_Left.value: "Left",
    Qt.Key.Key_Up.value: "Up",
    Qt.Key.Key_Right.value: "Right",
    Qt.Key.Key_Down.value: "Down",
    Qt.Key.Key_Return.value: "Return",
    Qt.Key.Key_Enter.value: "Enter",
    Qt.Key.Key_Select.value: "Select",
}

_MODIFIER_NAMES = (
    (Qt.KeyboardModifier.ShiftModifier, "shift"),
    (Qt.KeyboardModifier.ControlModifier, "ctrl"),
    (Qt.KeyboardModifier.AltModifier, "alt"),
    (Qt.KeyboardModifier.MetaModifier, "meta"),
)


def qt_key_name(event: QKeyEvent) -> Optional[str]:
    return _KEY_NAMES.get(int(event.key()))


def qt_modifier_names(event: QKeyEvent) -> List[str]:
    # Arrow keys carry KeypadModifier on some platforms; only chorded modifiers count.
    modifiers = event.modifiers()
    return [name for flag, name in _MODIFIER_NAMES if modifiers & flag]


class QtKeyFilter(QObject):
    """Application-wide event filter feeding key and focus events to a navigator."""

    def __init__(self, navigator: "SpatialNavigator", root: QWidget) -> None:
        super().__init__()
        self._navigator = navigator
        self._root = root

    def _is_key_target(self, obj: QObject) -> bool:
        focused = QApplication.focusWidget()
        if focused is not None:
            return obj is focused
        return obj is self._root.window()

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # type: ignore[override]
        etype = event.type()
        if etype == QEvent.Type.KeyPress and isinstance(event, QKeyEvent):
            if not self._is_key_target(obj):
                return False
            key = qt_key_name(event)
            if key is None:
                return False
            return self._navigator.handle_key_down(key, qt_modifier_names(event))
        if etype == QEvent.Type.KeyRelease and isinstance(event, QKeyEvent):
            if not self._is_key_target(obj):
                return False
            key = qt_key_name(event)
            if key is None:
                return False
            return self._navigator.handle_key_up(key, qt_modifier_names(event))
        if etype == QEvent.Type.FocusIn and isinstance(obj, QWidget):
            self._navigator.handle_native_focus(obj)
        elif etype == QEvent.Type.FocusOut and isinstance(obj, QWidget):
            self._navigator.handle_native_blur(obj)
        return False


class QtHost:
    """:class:`~spatial_nav.host.NavigationHost` over a PyQt6 widget tree."""

    def __init__(self, root: QWidget, *, bus: Optional[EventBus] = None) -> None:
        self.root = root
        self.bus = bus or EventBus()
        self._filter: Optional[QtKeyFilter] = None

    def measure(self, element: Any) -> Optional[Geometry]:
        if not isinstance(element, QWidget):
            return None
        try:
            origin = element.mapToGlobal(QPoint(0, 0))
        except RuntimeError:
            # Underlying C++ widget already deleted.
            return None
        size = element.size()
        return (origin.x(), origin.y(), size.width(), size.height())

    def _widgets(self) -> List[QWidget]:
        return [self.root, *self.root.findChildren(QWidget)]

    def query(self, selector: str) -> Sequence[Any]:
        return [widget for widget in self._widgets() if self.matches(widget, selector)]

    def matches(self, element: Any, selector: str) -> bool:
        if not isinstance(element, QWidget):
            return False
        for token in (part.strip() for part in selector.split(",")):
            if not token:
                continue
            if token == "*":
                return True
            if token.startswith("#"):
                if element.objectName() == token[1:]:
                    return True
            elif token.startswith("."):
                classes = element.property(NAV_CLASS_PROPERTY)
                if classes and token[1:] in str(classes).split():
                    return True
            elif element.inherits(token):
                return True
        return False

    def is_visible(self, element: Any) -> bool:
        if not isinstance(element, QWidget) or not element.isVisible():
            return False
        return not (element.width() <= 0 and element.height() <= 0)

    def is_disabled(self, element: Any) -> bool:
        return isinstance(element, QWidget) and not element.isEnabled()

    def focus(self, element: Any) -> None:
        element.setFocus(Qt.FocusReason.OtherFocusReason)

    def blur(self, element: Any) -> None:
        element.clearFocus()

    def current_focus(self) -> Any:
        return QApplication.focusWidget()

    def notify(self, element: Any, event: str, detail: Mapping[str, Any], cancelable: bool) -> bool:
        return self.bus.dispatch(element, event, detail, cancelable)

    def direction_override(self, element: Any, direction: str) -> Optional[str]:
        if not isinstance(element, QWidget):
            return None
        value = element.property(f"sn-{direction}")
        return None if value is None else str(value)

    def make_focusable(self, element: Any) -> None:
        if element.focusPolicy() == Qt.FocusPolicy.NoFocus:
            element.setFocusPolicy(Qt.FocusPolicy.ClickFocus)

    def call_soon(self, callback: Callable[[], None]) -> None:
        QTimer.singleShot(0, callback)

    def attach(self, navigator: "SpatialNavigator") -> None:
        app = QApplication.instance()
        if app is None:
            _LOGGER.warning("No QApplication instance; key handling not installed")
            return
        self.detach()
        self._filter = QtKeyFilter(navigator, self.root)
        app.installEventFilter(self._filter)
        _LOGGER.debug("Installed navigation event filter on %s", type(app).__name__)

    def detach(self) -> None:
        if self._filter is None:
            return
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self._filter)
        self._filter = None
