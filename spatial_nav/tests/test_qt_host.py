from __future__ import annotations

import pytest
from PyQt6.QtCore import QEvent, Qt
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import QApplication, QPushButton, QWidget

from spatial_nav.events import EventBus
from spatial_nav.navigator import SpatialNavigator
from spatial_nav.qt_host import QtHost, qt_key_name, qt_modifier_names


@pytest.fixture
def qt_app():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def window(qt_app):
    root = QWidget()
    root.resize(400, 200)
    buttons = {}
    for name, (left, top) in {"first": (0, 0), "second": (120, 0), "third": (0, 60)}.items():
        button = QPushButton(name, root)
        button.setObjectName(name)
        button.setProperty("navClass", "menu")
        button.setGeometry(left, top, 100, 40)
        buttons[name] = button
    root.show()
    qt_app.processEvents()
    yield root, buttons
    root.close()
    root.deleteLater()
    qt_app.processEvents()


@pytest.mark.pyqt_required
def test_measure_uses_window_relative_geometry(window):
    root, buttons = window
    host = QtHost(root)

    first = host.measure(buttons["first"])
    second = host.measure(buttons["second"])

    assert first[2:] == (100, 40)
    assert second[0] - first[0] == 120
    assert second[1] == first[1]
    assert host.measure("not a widget") is None


@pytest.mark.pyqt_required
def test_query_and_matches(window):
    root, buttons = window
    host = QtHost(root)

    assert host.query(".menu") == [buttons["first"], buttons["second"], buttons["third"]]
    assert host.query("#second") == [buttons["second"]]
    assert host.matches(buttons["third"], "QPushButton")
    assert host.matches(root, "QWidget")
    assert not host.matches(root, ".menu")


@pytest.mark.pyqt_required
def test_visibility_disabled_and_overrides(window):
    root, buttons = window
    host = QtHost(root)
    buttons["third"].hide()
    buttons["second"].setEnabled(False)
    buttons["first"].setProperty("sn-down", "#second")

    assert host.is_visible(buttons["first"])
    assert not host.is_visible(buttons["third"])
    assert host.is_disabled(buttons["second"])
    assert host.direction_override(buttons["first"], "down") == "#second"
    assert host.direction_override(buttons["first"], "up") is None


@pytest.mark.pyqt_required
def test_make_focusable_only_touches_unfocusable_widgets(window):
    root, buttons = window
    host = QtHost(root)
    label = QWidget(root)
    policy = buttons["first"].focusPolicy()

    host.make_focusable(label)
    host.make_focusable(buttons["first"])

    assert label.focusPolicy() == Qt.FocusPolicy.ClickFocus
    assert buttons["first"].focusPolicy() == policy


@pytest.mark.pyqt_required
def test_navigator_moves_between_widgets(window):
    root, buttons = window
    host = QtHost(root, bus=EventBus(record_history=True))
    navigator = SpatialNavigator(host)
    navigator.init()
    try:
        navigator.add("menu", {"selector": ".menu"})

        assert navigator.move("right", buttons["first"]) is True
        assert navigator.registry.get("menu").last_focused_element is buttons["second"]
        assert navigator.move("down", buttons["first"]) is True
        assert navigator.registry.get("menu").last_focused_element is buttons["third"]
        assert "sn:focused" in host.bus.names()
    finally:
        navigator.uninit()


@pytest.mark.pyqt_required
def test_key_event_translation(qt_app):
    plain = QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_Left, Qt.KeyboardModifier.NoModifier)
    shifted = QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_Down, Qt.KeyboardModifier.ShiftModifier)
    other = QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_A, Qt.KeyboardModifier.NoModifier)

    assert qt_key_name(plain) == "Left"
    assert qt_modifier_names(plain) == []
    assert qt_key_name(shifted) == "Down"
    assert qt_modifier_names(shifted) == ["shift"]
    assert qt_key_name(other) is None
