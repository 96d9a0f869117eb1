"""Configurable control schemes that translate raw keys into navigation actions."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from spatial_nav.config import Direction

LOGGER = logging.getLogger("SpatialNav.Core")

ACTIVATE_ACTION = "activate"
ACTION_DIRECTIONS: Dict[str, Direction] = {
    "navigate_left": Direction.LEFT,
    "navigate_up": Direction.UP,
    "navigate_right": Direction.RIGHT,
    "navigate_down": Direction.DOWN,
}
KNOWN_ACTIONS = frozenset(ACTION_DIRECTIONS) | {ACTIVATE_ACTION}

# Default layout that can be extended by the user later on. Numeric entries are
# the classic keyCodes delivered by browsers and most TV remotes.
DEFAULT_CONFIG = {
    "active_scheme": "keyboard_default",
    "schemes": {
        "keyboard_default": {
            "device_type": "keyboard",
            "display_name": "Keyboard (default)",
            "bindings": {
                "navigate_left": ["<Left>", "37"],
                "navigate_up": ["<Up>", "38"],
                "navigate_right": ["<Right>", "39"],
                "navigate_down": ["<Down>", "40"],
                "activate": ["<Return>", "<Enter>", "13"],
            },
        },
        "remote_control": {
            "device_type": "remote",
            "display_name": "TV remote",
            "bindings": {
                "navigate_left": ["<Left>", "37"],
                "navigate_up": ["<Up>", "38"],
                "navigate_right": ["<Right>", "39"],
                "navigate_down": ["<Down>", "40"],
                "activate": ["<OK>", "<Select>", "13"],
            },
        },
    },
}


@dataclass
class ControlScheme:
    """Container for a set of bindings and some metadata."""

    name: str
    device_type: str
    display_name: str
    bindings: Dict[str, List[str]]


@dataclass
class BindingConfig:
    """Representation of the configuration file contents."""

    schemes: Dict[str, ControlScheme]
    active_scheme: str
    source_path: Optional[Path] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], source_path: Optional[Path] = None) -> "BindingConfig":
        schemes = {
            name: ControlScheme(
                name=name,
                device_type=spec.get("device_type", "keyboard"),
                display_name=spec.get("display_name", name),
                bindings={
                    action: list(inputs or [])
                    for action, inputs in (spec.get("bindings") or {}).items()
                },
            )
            for name, spec in payload.get("schemes", {}).items()
        }

        active = payload.get("active_scheme")
        if active not in schemes:
            raise ValueError(f"Active scheme '{active}' is not defined in keybindings file {source_path}")
        return cls(schemes=schemes, active_scheme=active, source_path=source_path)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "BindingConfig":
        """Load config from disk, creating the default file if missing."""

        if path is None:
            return cls.from_payload(DEFAULT_CONFIG)
        if not path.exists():
            path.write_text(json.dumps(DEFAULT_CONFIG, indent=2))
        payload = json.loads(path.read_text())
        return cls.from_payload(payload, source_path=path)

    def get_scheme(self, name: Optional[str] = None) -> ControlScheme:
        """Return the requested scheme or the currently active one."""

        scheme_name = name or self.active_scheme
        try:
            return self.schemes[scheme_name]
        except KeyError as exc:
            raise ValueError(f"Unknown control scheme '{scheme_name}'") from exc


class KeyTranslator:
    """Maps raw key tokens of the active scheme to navigation actions."""

    def __init__(self, config: BindingConfig) -> None:
        self.config = config
        self._lookup: Dict[str, str] = {}
        self.activate()

    @classmethod
    def default(cls) -> "KeyTranslator":
        return cls(BindingConfig.load())

    @property
    def scheme(self) -> ControlScheme:
        return self.config.get_scheme()

    def activate(self, scheme_name: Optional[str] = None) -> None:
        """Switch to ``scheme_name`` (or re-read the active scheme)."""

        scheme = self.config.get_scheme(scheme_name)
        lookup: Dict[str, str] = {}
        for action, sequences in scheme.bindings.items():
            if action not in KNOWN_ACTIONS:
                LOGGER.warning("Skipping unknown action '%s' in scheme '%s'", action, scheme.name)
                continue
            for sequence in sequences:
                try:
                    token = self._normalize_sequence(sequence)
                except ValueError as exc:
                    LOGGER.warning("Skipping invalid binding %r for %s: %s", sequence, action, exc)
                    continue
                lookup[token] = action
        self._lookup = lookup
        self.config.active_scheme = scheme.name

    def translate(self, key: Any) -> Optional[str]:
        if key is None:
            return None
        try:
            token = self._normalize_sequence(str(key))
        except ValueError:
            return None
        return self._lookup.get(token)

    def direction_for(self, key: Any) -> Optional[Direction]:
        action = self.translate(key)
        return ACTION_DIRECTIONS.get(action) if action else None

    @staticmethod
    def _normalize_sequence(sequence: str) -> str:
        seq = sequence.strip()
        if seq.startswith("<") and seq.endswith(">"):
            seq = seq[1:-1].strip()
        if not seq:
            raise ValueError("Binding sequence cannot be empty")
        return seq.lower()
