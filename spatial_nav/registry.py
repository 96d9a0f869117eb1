"""Named navigation sections, their layered config and focus history."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional

from spatial_nav import selectors
from spatial_nav.config import NavConfig, normalize_config
from spatial_nav.errors import SectionExistsError, UnknownSectionError
from spatial_nav.host import NavigationHost
from spatial_nav.resolver import PreviousMove

_LOGGER = logging.getLogger("SpatialNav.Core")

ID_POOL_PREFIX = "section-"


@dataclass
class Section:
    """A section's overrides (only keys explicitly set) plus its history."""

    section_id: str
    overrides: Dict[str, Any] = field(default_factory=dict)
    last_focused_element: Any = None
    previous: Optional[PreviousMove] = None

    def get(self, key: str, fallback: Any = None) -> Any:
        return self.overrides.get(key, fallback)

    @property
    def disabled(self) -> bool:
        return bool(self.overrides.get("disabled", False))


class SectionRegistry:
    """Owns every section and the global config they inherit from."""

    def __init__(self, host: NavigationHost, global_config: Optional[NavConfig] = None) -> None:
        self.host = host
        self.global_config = global_config or NavConfig()
        self._sections: Dict[str, Section] = {}
        self._id_pool = 0
        self.default_section_id: str = ""
        self.last_section_id: str = ""

    # Lifecycle -----------------------------------------------------------

    def clear(self) -> None:
        self._sections = {}
        self.default_section_id = ""
        self.last_section_id = ""

    def reset_id_pool(self) -> None:
        self._id_pool = 0

    # Mapping helpers -----------------------------------------------------

    def __contains__(self, section_id: object) -> bool:
        return isinstance(section_id, str) and section_id in self._sections

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sections))

    def __len__(self) -> int:
        return len(self._sections)

    def get(self, section_id: Optional[str]) -> Optional[Section]:
        if not section_id:
            return None
        return self._sections.get(section_id)

    def require(self, section_id: str) -> Section:
        section = self.get(section_id)
        if section is None:
            raise UnknownSectionError(section_id)
        return section

    # Mutation ------------------------------------------------------------

    def generate_id(self) -> str:
        while True:
            self._id_pool += 1
            candidate = f"{ID_POOL_PREFIX}{self._id_pool}"
            if candidate not in self._sections:
                return candidate

    def add(self, section_id: Optional[str] = None, config: Optional[Mapping[str, Any]] = None) -> str:
        config = dict(config or {})
        if not section_id:
            explicit = config.get("id")
            section_id = explicit if isinstance(explicit, str) and explicit else self.generate_id()
        if section_id in self._sections:
            raise SectionExistsError(section_id)
        self._sections[section_id] = Section(section_id=section_id)
        self.set_section(section_id, config)
        _LOGGER.debug("Added section %s (%d total)", section_id, len(self._sections))
        return section_id

    def set_global(self, config: Mapping[str, Any]) -> None:
        """Overwrite global keys; ``None`` values are ignored."""
        for key, value in normalize_config(config).items():
            if value is not None:
                setattr(self.global_config, key, value)

    def set_section(self, section_id: str, config: Mapping[str, Any]) -> None:
        """Overwrite section keys; a ``None`` value drops the override."""
        section = self.require(section_id)
        for key, value in normalize_config(config).items():
            if value is None:
                section.overrides.pop(key, None)
            else:
                section.overrides[key] = value

    def remove(self, section_id: str) -> bool:
        if not section_id or not isinstance(section_id, str):
            raise ValueError('Please assign the "sectionId"!')
        if section_id not in self._sections:
            return False
        del self._sections[section_id]
        if self.last_section_id == section_id:
            self.last_section_id = ""
        _LOGGER.debug("Removed section %s", section_id)
        return True

    def set_disabled(self, section_id: str, disabled: bool) -> bool:
        section = self.get(section_id)
        if section is None:
            return False
        section.overrides["disabled"] = disabled
        return True

    def set_default_section(self, section_id: Optional[str]) -> None:
        if not section_id:
            self.default_section_id = ""
            return
        self.require(section_id)
        self.default_section_id = section_id

    # Queries -------------------------------------------------------------

    def effective_config(self, section_id: str) -> NavConfig:
        section = self.require(section_id)
        return self.global_config.merged(section.overrides)

    def section_selector(self, section: Section) -> selectors.Selector:
        return selectors.to_selector(section.get("selector", ""))

    def section_of(self, element: Any) -> Optional[str]:
        """First enabled section, in insertion order, whose selector matches ``element``."""
        if element is None:
            return None
        for section_id, section in self._sections.items():
            if section.disabled:
                continue
            if selectors.matches(element, self.section_selector(section), self.host):
                return section_id
        return None

    def is_navigable(self, element: Any, section_id: Optional[str], verify_selector: bool = False) -> bool:
        section = self.get(section_id)
        if element is None or section is None or section.disabled:
            return False
        if not self.host.is_visible(element) or self.host.is_disabled(element):
            return False
        if verify_selector and not selectors.matches(element, self.section_selector(section), self.host):
            return False
        navigable_filter = section.get("navigable_filter")
        if callable(navigable_filter):
            if navigable_filter(element, section.section_id) is False:
                return False
        elif callable(self.global_config.navigable_filter):
            if self.global_config.navigable_filter(element, section.section_id) is False:
                return False
        return True

    def navigable_elements(self, section_id: str) -> List[Any]:
        section = self.require(section_id)
        return [
            element
            for element in selectors.resolve(self.section_selector(section), self.host)
            if self.is_navigable(element, section_id)
        ]

    def default_element(self, section_id: str) -> Any:
        section = self.require(section_id)
        raw = section.get("default_element")
        if not raw:
            return None
        element = selectors.first(selectors.to_selector(raw), self.host)
        if self.is_navigable(element, section_id, verify_selector=True):
            return element
        return None

    def last_focused_element(self, section_id: str) -> Any:
        section = self.require(section_id)
        element = section.last_focused_element
        if not self.is_navigable(element, section_id, verify_selector=True):
            return None
        return element

    def record_focus(self, element: Any, section_id: Optional[str] = None) -> None:
        if not section_id:
            section_id = self.section_of(element)
        section = self.get(section_id)
        if section is not None:
            section.last_focused_element = element
            self.last_section_id = section.section_id

