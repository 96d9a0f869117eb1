"""Navigation config records, enums and the JSON config loader."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from spatial_nav.errors import ConfigFileError

_LOGGER = logging.getLogger("SpatialNav.Core")

DEFAULT_TAB_INDEX_IGNORE_LIST = "a, input, select, textarea, button, iframe, [contentEditable=true]"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def reverse(self) -> "Direction":
        return REVERSE[self]

    @classmethod
    def coerce(cls, value: object) -> Optional["Direction"]:
        """Return the matching direction, or ``None`` for anything else."""
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


REVERSE: Dict[Direction, Direction] = {
    Direction.LEFT: Direction.RIGHT,
    Direction.UP: Direction.DOWN,
    Direction.RIGHT: Direction.LEFT,
    Direction.DOWN: Direction.UP,
}


class EnterTo(str, Enum):
    LAST_FOCUSED = "last-focused"
    DEFAULT_ELEMENT = "default-element"


class Restrict(str, Enum):
    SELF_FIRST = "self-first"
    SELF_ONLY = "self-only"
    NONE = "none"


NavigableFilter = Callable[[Any, str], bool]


@dataclass
class NavConfig:
    """Global navigation settings; sections override any subset of these keys.

    ``leave_for`` maps a direction to a selector. An empty string (or
    ``None``) for a direction means "go nowhere"; a missing direction means
    the normal rules apply.
    """

    selector: Any = ""
    straight_only: bool = False
    straight_overlap_threshold: float = 0.5
    remember_source: bool = False
    disabled: bool = False
    default_element: Any = ""
    enter_to: Optional[EnterTo] = None
    leave_for: Optional[Mapping[Direction, Any]] = None
    restrict: Restrict = Restrict.SELF_FIRST
    tab_index_ignore_list: Any = DEFAULT_TAB_INDEX_IGNORE_LIST
    navigable_filter: Optional[NavigableFilter] = None

    def merged(self, overrides: Mapping[str, Any]) -> "NavConfig":
        """Return a copy with ``overrides`` layered on top."""
        return replace(self, **{key: value for key, value in overrides.items() if key in CONFIG_KEYS})


CONFIG_KEYS: Tuple[str, ...] = tuple(item.name for item in fields(NavConfig))

# Key spellings accepted from JSON files and callers porting existing configs.
_CAMEL_ALIASES: Dict[str, str] = {
    "straightOnly": "straight_only",
    "straightOverlapThreshold": "straight_overlap_threshold",
    "rememberSource": "remember_source",
    "defaultElement": "default_element",
    "enterTo": "enter_to",
    "leaveFor": "leave_for",
    "tabIndexIgnoreList": "tab_index_ignore_list",
    "navigableFilter": "navigable_filter",
}


def normalize_key(key: str) -> str:
    return _CAMEL_ALIASES.get(key, key)


def normalize_value(key: str, value: Any) -> Any:
    """Coerce a single config value; ``None`` passes through untouched."""

    if value is None:
        return None
    if key in {"straight_only", "remember_source", "disabled"}:
        return bool(value)
    if key == "straight_overlap_threshold":
        try:
            threshold = float(value)
        except (TypeError, ValueError):
            _LOGGER.warning("Ignoring invalid straight_overlap_threshold %r", value)
            return None
        return max(0.0, min(threshold, 1.0))
    if key == "restrict":
        if isinstance(value, Restrict):
            return value
        try:
            return Restrict(str(value).strip().lower())
        except ValueError:
            _LOGGER.warning("Ignoring unknown restrict policy %r", value)
            return None
    if key == "enter_to":
        if isinstance(value, EnterTo):
            return value
        token = str(value).strip().lower()
        if not token:
            return None
        try:
            return EnterTo(token)
        except ValueError:
            _LOGGER.warning("Ignoring unknown enter_to policy %r", value)
            return None
    if key == "leave_for":
        if not isinstance(value, Mapping):
            _LOGGER.warning("Ignoring leave_for that is not a mapping: %r", value)
            return None
        leave_for: Dict[Direction, Any] = {}
        for raw_direction, target in value.items():
            direction = Direction.coerce(raw_direction)
            if direction is None:
                _LOGGER.warning("Ignoring leave_for entry for unknown direction %r", raw_direction)
                continue
            leave_for[direction] = target
        return leave_for
    return value


def normalize_config(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate key spellings and coerce values, keeping explicit ``None`` entries."""

    normalized: Dict[str, Any] = {}
    for raw_key, raw_value in config.items():
        key = normalize_key(raw_key)
        if key not in CONFIG_KEYS:
            continue
        value = normalize_value(key, raw_value)
        if value is None and raw_value is not None:
            # Invalid value: drop it rather than treating it as a deletion.
            continue
        normalized[key] = value
    return normalized


@dataclass
class SectionSpec:
    section_id: Optional[str]
    config: Dict[str, Any]


@dataclass
class LoadedConfig:
    global_config: Dict[str, Any] = field(default_factory=dict)
    sections: List[SectionSpec] = field(default_factory=list)
    default_section: Optional[str] = None
    source_path: Optional[Path] = None


def _known_keys(block: Mapping[str, Any], *, context: str, extra: Tuple[str, ...] = ()) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    for key, value in block.items():
        normalized = normalize_key(key)
        if normalized in extra:
            cleaned[normalized] = value
            continue
        if normalized not in CONFIG_KEYS or normalized == "navigable_filter":
            _LOGGER.warning("Ignoring unknown %s config key '%s'", context, key)
            continue
        cleaned[normalized] = value
    return cleaned


def load_nav_config(path: Path) -> LoadedConfig:
    """Read a navigation config JSON file.

    Layout::

        {
          "global": {"straight_only": false, ...},
          "sections": [{"id": "menu", "selector": ".menu-item", ...}],
          "default_section": "menu"
        }

    A missing file yields the defaults. A file that is unreadable, is not
    JSON, or has the wrong shape raises :class:`ConfigFileError`.
    """

    try:
        raw_text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        _LOGGER.debug("Navigation config not found at %s; using defaults", path)
        return LoadedConfig(source_path=path)
    except OSError as exc:
        raise ConfigFileError(f"Unable to read navigation config {path}: {exc}") from exc
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ConfigFileError(f"Navigation config {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigFileError(f"Navigation config {path} must be a JSON object")

    global_block = data.get("global") or {}
    if not isinstance(global_block, dict):
        raise ConfigFileError(f"'global' in {path} must be an object")
    sections_block = data.get("sections") or []
    if not isinstance(sections_block, list):
        raise ConfigFileError(f"'sections' in {path} must be a list")

    sections: List[SectionSpec] = []
    for index, entry in enumerate(sections_block):
        if not isinstance(entry, dict):
            raise ConfigFileError(f"Section #{index} in {path} must be an object")
        cleaned = _known_keys(entry, context=f"section #{index}", extra=("id",))
        section_id = cleaned.pop("id", None)
        sections.append(
            SectionSpec(
                section_id=str(section_id) if section_id is not None else None,
                config=normalize_config(cleaned),
            )
        )

    default_section = data.get("default_section")
    return LoadedConfig(
        global_config=normalize_config(_known_keys(global_block, context="global")),
        sections=sections,
        default_section=str(default_section) if default_section else None,
        source_path=path,
    )


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "off", "no", ""}
