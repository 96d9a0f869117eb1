"""Optional gamepad bridge that maps a pad's d-pad and A button to navigation actions."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Tuple

from spatial_nav.config import env_flag
from spatial_nav.input_bindings import ACTIVATE_ACTION

try:
    import pygame
except Exception:  # pragma: no cover - optional dependency
    pygame = None  # type: ignore

LOGGER = logging.getLogger("SpatialNav.Gamepad")

# Xbox-style mapping based on SDL/pygame defaults.
_BUTTON_ACTIONS: Dict[int, str] = {
    0: ACTIVATE_ACTION,  # A
}
_HAT_ACTIONS: Dict[Tuple[int, int], str] = {
    (0, 1): "navigate_up",
    (0, -1): "navigate_down",
    (-1, 0): "navigate_left",
    (1, 0): "navigate_right",
}


class GamepadBridge:
    """Poll a pygame-backed gamepad and hand mapped actions to the UI thread."""

    def __init__(
        self,
        trigger_action: Callable[[str], bool],
        call_soon: Callable[[Callable[[], None]], None],
        *,
        enabled: bool | None = None,
        poll_interval: float = 0.02,
    ) -> None:
        self._trigger_action = trigger_action
        self._call_soon = call_soon
        self.poll_interval = poll_interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._enabled = enabled if enabled is not None else env_flag("SPATIAL_NAV_GAMEPAD", True)

    @classmethod
    def for_navigator(cls, navigator: Any, **kwargs: Any) -> "GamepadBridge":
        return cls(navigator.handle_action, navigator.host.call_soon, **kwargs)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        if not self._enabled:
            return False
        if pygame is None:
            LOGGER.info("Gamepad bridge disabled: pygame not available")
            return False
        try:
            pygame.init()
            pygame.joystick.init()
        except Exception as exc:
            LOGGER.info("Gamepad bridge disabled: pygame init failed (%s)", exc)
            return False
        if pygame.joystick.get_count() < 1:
            LOGGER.info("Gamepad bridge disabled: no joysticks detected")
            return False
        try:
            joystick = pygame.joystick.Joystick(0)
            joystick.init()
            LOGGER.info("Gamepad bridge active with '%s'", joystick.get_name())
        except Exception as exc:
            LOGGER.info("Gamepad bridge disabled: joystick init failed (%s)", exc)
            return False

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="gamepad-bridge", daemon=True)
        self._thread.start()
        return True

    def stop(self) -> None:
        self._enabled = False
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=0.5)
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                for event in pygame.event.get():  # type: ignore[attr-defined]
                    self._handle_event(event)
            except Exception as exc:
                LOGGER.info("Gamepad bridge stopped after error: %s", exc)
                return
            time.sleep(self.poll_interval)

    def _handle_event(self, event: Any) -> None:
        etype = getattr(event, "type", None)
        if etype is None:
            return
        if etype == pygame.JOYBUTTONDOWN:  # type: ignore[attr-defined]
            self._handle_button_down(getattr(event, "button", -1))
        elif etype == pygame.JOYHATMOTION:  # type: ignore[attr-defined]
            self._handle_hat(getattr(event, "value", (0, 0)))

    def _handle_button_down(self, button: int) -> None:
        action = _BUTTON_ACTIONS.get(button)
        if action:
            self._dispatch(action)

    def _handle_hat(self, value: Tuple[int, int]) -> None:
        action = _HAT_ACTIONS.get(tuple(value))  # type: ignore[arg-type]
        if action:
            self._dispatch(action)

    def _dispatch(self, action: str) -> None:
        def _call() -> None:
            self._trigger_action(action)

        try:
            self._call_soon(_call)
        except Exception as exc:
            LOGGER.debug("Gamepad action %s could not be scheduled (%s); running inline", action, exc)
            _call()
