"""Focus orchestration and the public navigation API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from spatial_nav import selectors
from spatial_nav.config import Direction, EnterTo, LoadedConfig, NavConfig, Restrict
from spatial_nav.events import NavEvent
from spatial_nav.host import NavigationHost
from spatial_nav.input_bindings import ACTIVATE_ACTION, ACTION_DIRECTIONS, KeyTranslator
from spatial_nav.registry import SectionRegistry
from spatial_nav.resolver import PreviousMove, navigate

_LOGGER = logging.getLogger("SpatialNav.Core")


@dataclass
class NavigationState:
    ready: bool = False
    paused: bool = False
    in_transition: bool = False


def _exclude(elements: Iterable[Any], excluded: Iterable[Any]) -> List[Any]:
    excluded_ids = {id(item) for item in excluded}
    return [element for element in elements if id(element) not in excluded_ids]


class SpatialNavigator:
    """Moves focus between the elements of registered sections.

    One navigator owns one :class:`SectionRegistry` and talks to the UI only
    through its :class:`NavigationHost`. Every call runs synchronously;
    ``NavigationState.in_transition`` turns focus requests made from inside a
    lifecycle listener into silent commits.
    """

    def __init__(
        self,
        host: NavigationHost,
        *,
        config: Optional[NavConfig] = None,
        key_translator: Optional[KeyTranslator] = None,
    ) -> None:
        self.host = host
        self.registry = SectionRegistry(host, config)
        self.state = NavigationState()
        self.key_translator = key_translator or KeyTranslator.default()

    # Lifecycle -----------------------------------------------------------

    def init(self) -> None:
        if self.state.ready:
            return
        self.host.attach(self)
        self.state.ready = True
        _LOGGER.debug("Spatial navigation initialised")

    def uninit(self) -> None:
        self.host.detach()
        self.clear()
        self.registry.reset_id_pool()
        self.state.ready = False
        _LOGGER.debug("Spatial navigation uninitialised")

    def clear(self) -> None:
        self.registry.clear()
        self.state.in_transition = False

    @property
    def section_count(self) -> int:
        return len(self.registry)

    # Section management --------------------------------------------------

    def add(
        self,
        section_id: Union[str, Mapping[str, Any], None] = None,
        config: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> str:
        """Register a section; ``add(config)`` and ``add(section_id, config)`` both work."""

        if isinstance(section_id, Mapping):
            config, section_id = section_id, None
        merged = dict(config or {})
        merged.update(options)
        return self.registry.add(section_id, merged)

    def remove(self, section_id: str) -> bool:
        return self.registry.remove(section_id)

    def set(
        self,
        section_id: Union[str, Mapping[str, Any], None] = None,
        config: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> None:
        """Update the global config (``set(config)``) or one section's overrides.

        For a section, passing ``None`` for a key drops the override so the
        global value applies again. For the global config ``None`` is ignored.
        """

        if isinstance(section_id, Mapping):
            config, section_id = section_id, None
        merged = dict(config or {})
        merged.update(options)
        if section_id:
            self.registry.set_section(section_id, merged)
        else:
            self.registry.set_global(merged)

    def enable(self, section_id: str) -> bool:
        return self.registry.set_disabled(section_id, False)

    def disable(self, section_id: str) -> bool:
        return self.registry.set_disabled(section_id, True)

    def pause(self) -> None:
        self.state.paused = True

    def resume(self) -> None:
        self.state.paused = False

    def set_default_section(self, section_id: Optional[str] = None) -> None:
        self.registry.set_default_section(section_id)

    def apply_config(self, loaded: LoadedConfig) -> List[str]:
        """Apply a file-loaded config: global values first, then each section."""

        self.registry.set_global(loaded.global_config)
        added = [self.registry.add(spec.section_id, spec.config) for spec in loaded.sections]
        if loaded.default_section:
            self.registry.set_default_section(loaded.default_section)
        return added

    def make_focusable(self, section_id: Optional[str] = None) -> None:
        if section_id:
            targets = [self.registry.require(section_id)]
        else:
            targets = [self.registry.require(sid) for sid in self.registry]
        for section in targets:
            ignore = selectors.to_selector(
                section.get("tab_index_ignore_list", self.registry.global_config.tab_index_ignore_list)
            )
            for element in selectors.resolve(self.registry.section_selector(section), self.host):
                if not selectors.matches(element, ignore, self.host):
                    self.host.make_focusable(element)

    # Public focus API ----------------------------------------------------

    def focus(self, selector: Any = None, silent: bool = False) -> bool:
        """Focus a section (by id), an extended selector, or an element.

        With no selector the default section chain is used. ``silent``
        suppresses lifecycle events for this call only.
        """

        if isinstance(selector, bool):
            selector, silent = None, selector
        auto_pause = silent and not self.state.paused
        if auto_pause:
            self.pause()
        try:
            if selector is None or selector == "":
                return self._focus_section()
            if isinstance(selector, str):
                if selector in self.registry:
                    return self._focus_section(selector)
                return self._focus_extended_selector(selector)
            if isinstance(selector, (selectors.Query, selectors.SectionRef, selectors.DefaultSectionRef)):
                return self._focus_extended_selector(selector)
            element = selector
            if isinstance(selector, (list, tuple, selectors.Elements)):
                element = selectors.first(selectors.to_selector(selector), self.host)
            section_id = self.registry.section_of(element)
            if self.registry.is_navigable(element, section_id):
                return self._focus_element(element, section_id)
            return False
        finally:
            if auto_pause:
                self.resume()

    def move(self, direction: Any, selector: Any = None) -> bool:
        """Move focus from the current element (or ``selector``'s first match)."""

        resolved = Direction.coerce(direction)
        if resolved is None:
            return False
        if selector is not None:
            element = selectors.first(selectors.to_selector(selector), self.host)
        else:
            element = self.host.current_focus()
        if element is None:
            return False
        section_id = self.registry.section_of(element)
        if not section_id:
            return False
        detail = {"direction": resolved.value, "section_id": section_id, "cause": "api"}
        if not self.host.notify(element, NavEvent.WILL_MOVE.qualified, detail, True):
            return False
        return self._focus_next(resolved, element, section_id)

    # Input entry points --------------------------------------------------

    def handle_key_down(self, key: Any, modifiers: Iterable[str] = ()) -> bool:
        """Handle a raw key press; ``True`` when the host should swallow the key."""

        if not self.section_count or self.state.paused or any(modifiers):
            return False
        action = self.key_translator.translate(key)
        if action is None:
            return False
        return self.handle_action(action)

    def handle_key_up(self, key: Any, modifiers: Iterable[str] = ()) -> bool:
        if any(modifiers):
            return False
        if self.state.paused or not self.section_count:
            return False
        if self.key_translator.translate(key) != ACTIVATE_ACTION:
            return False
        current = self.host.current_focus()
        if current is not None and self.registry.section_of(current):
            if not self.host.notify(current, NavEvent.ENTER_UP.qualified, {}, True):
                return True
        return False

    def handle_action(self, action: str) -> bool:
        """Run a translated input action (direction or activate)."""

        if not self.section_count or self.state.paused:
            return False
        if action == ACTIVATE_ACTION:
            current = self.host.current_focus()
            if current is not None and self.registry.section_of(current):
                if not self.host.notify(current, NavEvent.ENTER_DOWN.qualified, {}, True):
                    return True
            return False

        direction = ACTION_DIRECTIONS.get(action)
        if direction is None:
            return False
        current = self.host.current_focus()
        if current is None:
            if self.registry.last_section_id in self.registry:
                current = self.registry.last_focused_element(self.registry.last_section_id)
            if current is None:
                self._focus_section()
                return True

        section_id = self.registry.section_of(current)
        if not section_id:
            return False
        detail = {"direction": direction.value, "section_id": section_id, "cause": "keydown"}
        if self.host.notify(current, NavEvent.WILL_MOVE.qualified, detail, True):
            self._focus_next(direction, current, section_id)
        return True

    def handle_native_focus(self, element: Any) -> None:
        """Report a focus change the UI made on its own (pointer, tab key)."""

        if element is None or not self.section_count or self.state.in_transition:
            return
        section_id = self.registry.section_of(element)
        if not section_id:
            return
        if self.state.paused:
            self.registry.record_focus(element, section_id)
            return
        detail = {"section_id": section_id, "native": True}
        if not self.host.notify(element, NavEvent.WILL_FOCUS.qualified, detail, True):
            self.state.in_transition = True
            try:
                self.host.blur(element)
            finally:
                self.state.in_transition = False
            return
        self.host.notify(element, NavEvent.FOCUSED.qualified, detail, False)
        self.registry.record_focus(element, section_id)

    def handle_native_blur(self, element: Any) -> None:
        if element is None or self.state.paused or not self.section_count or self.state.in_transition:
            return
        if not self.registry.section_of(element):
            return
        detail = {"native": True}
        if not self.host.notify(element, NavEvent.WILL_UNFOCUS.qualified, detail, True):
            self.state.in_transition = True

            def _restore() -> None:
                try:
                    self.host.focus(element)
                finally:
                    self.state.in_transition = False

            self.host.call_soon(_restore)
            return
        self.host.notify(element, NavEvent.UNFOCUSED.qualified, detail, False)

    # Transitions ---------------------------------------------------------

    def _focus_element(self, element: Any, section_id: Optional[str], direction: Optional[Direction] = None) -> bool:
        if element is None:
            return False
        current = self.host.current_focus()
        direction_value = direction.value if direction is not None else None

        def _silent_focus() -> None:
            if current is not None:
                self.host.blur(current)
            self.host.focus(element)
            self.registry.record_focus(element, section_id)

        if self.state.in_transition:
            _LOGGER.debug("Nested focus request for %r committed silently", element)
            _silent_focus()
            return True

        self.state.in_transition = True
        try:
            if self.state.paused:
                _silent_focus()
                return True

            if current is not None:
                unfocus_detail = {
                    "next_element": element,
                    "next_section_id": section_id,
                    "direction": direction_value,
                    "native": False,
                }
                if not self.host.notify(current, NavEvent.WILL_UNFOCUS.qualified, unfocus_detail, True):
                    return False
                self.host.blur(current)
                self.host.notify(current, NavEvent.UNFOCUSED.qualified, unfocus_detail, False)

            focus_detail = {
                "previous_element": current,
                "section_id": section_id,
                "direction": direction_value,
                "native": False,
            }
            if not self.host.notify(element, NavEvent.WILL_FOCUS.qualified, focus_detail, True):
                return False
            self.host.focus(element)
            self.host.notify(element, NavEvent.FOCUSED.qualified, focus_detail, False)
        finally:
            self.state.in_transition = False
        self.registry.record_focus(element, section_id)
        return True

    def _focus_extended_selector(self, raw: Any, direction: Optional[Direction] = None) -> bool:
        selector = selectors.to_selector(raw, extended=True)
        if isinstance(selector, selectors.DefaultSectionRef):
            return self._focus_section()
        if isinstance(selector, selectors.SectionRef):
            return self._focus_section(selector.section_id)
        element = selectors.first(selector, self.host)
        if element is None:
            return False
        section_id = self.registry.section_of(element)
        if self.registry.is_navigable(element, section_id):
            return self._focus_element(element, section_id, direction)
        return False

    def _section_range(self, section_id: Optional[str]) -> List[str]:
        ordered: List[str] = []

        def _add(candidate: Optional[str]) -> None:
            section = self.registry.get(candidate)
            if section is not None and not section.disabled and candidate not in ordered:
                ordered.append(candidate)  # type: ignore[arg-type]

        if section_id:
            _add(section_id)
        else:
            _add(self.registry.default_section_id)
            _add(self.registry.last_section_id)
            for candidate in self.registry:
                _add(candidate)
        return ordered

    def _focus_section(self, section_id: Optional[str] = None) -> bool:
        registry = self.registry
        for candidate in self._section_range(section_id):
            if registry.effective_config(candidate).enter_to == EnterTo.LAST_FOCUSED:
                element = registry.last_focused_element(candidate) or registry.default_element(candidate)
            else:
                element = registry.default_element(candidate) or registry.last_focused_element(candidate)
            if element is None:
                navigable = registry.navigable_elements(candidate)
                element = navigable[0] if navigable else None
            if element is not None:
                return self._focus_element(element, candidate)
        return False

    def _fire_navigate_failed(self, element: Any, direction: Direction) -> None:
        _LOGGER.debug("Navigation %s from %r failed", direction.value, element)
        self.host.notify(element, NavEvent.NAVIGATE_FAILED.qualified, {"direction": direction.value}, False)

    def _goto_leave_for(self, section_id: str, direction: Direction) -> Optional[bool]:
        """Follow the section's ``leave_for`` rule.

        Returns ``None`` for an explicit "go nowhere", ``True`` when focus
        moved, ``False`` when no rule applies or the target is unreachable.
        """

        leave_for = self.registry.effective_config(section_id).leave_for
        if not leave_for or direction not in leave_for:
            return False
        target = leave_for[direction]
        if target is None or target == "":
            return None
        if isinstance(target, (str, selectors.Query, selectors.SectionRef, selectors.DefaultSectionRef)):
            return self._focus_extended_selector(target, direction)
        if isinstance(target, (list, tuple, selectors.Elements)):
            target = selectors.first(selectors.to_selector(target), self.host)
        next_section_id = self.registry.section_of(target)
        if self.registry.is_navigable(target, next_section_id):
            return self._focus_element(target, next_section_id, direction)
        return False

    def _focus_next(self, direction: Direction, origin: Any, origin_section_id: str) -> bool:
        override = self.host.direction_override(origin, direction.value)
        if override is not None:
            if override == "" or not self._focus_extended_selector(override, direction):
                self._fire_navigate_failed(origin, direction)
                return False
            return True

        registry = self.registry
        section_elements: Dict[str, List[Any]] = {}
        all_elements: List[Any] = []
        for section_id in registry:
            section_elements[section_id] = registry.navigable_elements(section_id)
            all_elements.extend(section_elements[section_id])

        origin_section = registry.require(origin_section_id)
        config = registry.effective_config(origin_section_id)
        measure = self.host.measure
        previous = origin_section.previous

        if config.restrict in (Restrict.SELF_ONLY, Restrict.SELF_FIRST):
            own = section_elements.get(origin_section_id, [])
            target = navigate(origin, direction, _exclude(own, [origin]), config, measure, previous=previous)
            if target is None and config.restrict == Restrict.SELF_FIRST:
                others = _exclude(all_elements, own + [origin])
                target = navigate(origin, direction, others, config, measure, previous=previous)
        else:
            target = navigate(origin, direction, _exclude(all_elements, [origin]), config, measure, previous=previous)

        if target is None:
            if self._goto_leave_for(origin_section_id, direction):
                return True
            self._fire_navigate_failed(origin, direction)
            return False

        origin_section.previous = PreviousMove(target=origin, destination=target, reverse=direction.reverse)
        target_section_id = registry.section_of(target)
        if target_section_id != origin_section_id:
            result = self._goto_leave_for(origin_section_id, direction)
            if result:
                return True
            if result is None:
                self._fire_navigate_failed(origin, direction)
                return False
            if target_section_id:
                enter_to = registry.effective_config(target_section_id).enter_to
                entry = None
                if enter_to == EnterTo.LAST_FOCUSED:
                    entry = registry.last_focused_element(target_section_id) or registry.default_element(
                        target_section_id
                    )
                elif enter_to == EnterTo.DEFAULT_ELEMENT:
                    entry = registry.default_element(target_section_id)
                if entry is not None:
                    target = entry
        _LOGGER.debug("Moving %s from %r to %r", direction.value, origin, target)
        return self._focus_element(target, target_section_id, direction)
