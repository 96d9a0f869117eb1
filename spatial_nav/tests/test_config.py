from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from spatial_nav.config import (
    Direction,
    EnterTo,
    NavConfig,
    Restrict,
    env_flag,
    load_nav_config,
    normalize_config,
)
from spatial_nav.errors import ConfigFileError


def _write(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_direction_coerce_and_reverse() -> None:
    assert Direction.coerce(" Left ") is Direction.LEFT
    assert Direction.coerce(Direction.UP) is Direction.UP
    assert Direction.coerce("north") is None
    assert Direction.coerce(3) is None
    assert Direction.DOWN.reverse is Direction.UP


def test_normalize_config_translates_and_clamps(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="SpatialNav.Core"):
        normalized = normalize_config(
            {
                "straightOverlapThreshold": 3,
                "restrict": "Self-Only",
                "enterTo": "last-focused",
                "leaveFor": {"left": "#a", "sideways": "#b"},
                "rememberSource": 1,
                "unknown": True,
            }
        )

    assert normalized == {
        "straight_overlap_threshold": 1.0,
        "restrict": Restrict.SELF_ONLY,
        "enter_to": EnterTo.LAST_FOCUSED,
        "leave_for": {Direction.LEFT: "#a"},
        "remember_source": True,
    }
    assert "sideways" in caplog.text


def test_normalize_config_drops_invalid_values_but_keeps_none() -> None:
    normalized = normalize_config({"restrict": "everywhere", "enter_to": None, "straight_overlap_threshold": "wide"})

    assert normalized == {"enter_to": None}


def test_merged_layers_overrides_on_a_copy() -> None:
    base = NavConfig()

    merged = base.merged({"straight_only": True, "id": "ignored"})

    assert merged.straight_only is True
    assert base.straight_only is False


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    loaded = load_nav_config(tmp_path / "absent.json")

    assert loaded.global_config == {}
    assert loaded.sections == []
    assert loaded.default_section is None


def test_load_sections_and_global(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write(
        tmp_path / "nav.json",
        {
            "global": {"straightOnly": True, "colour": "red"},
            "sections": [
                {"id": "menu", "selector": ".menu", "enterTo": "default-element", "defaultElement": "#first"},
                {"selector": ".grid", "leaveFor": {"up": "@menu"}},
            ],
            "default_section": "menu",
        },
    )

    with caplog.at_level(logging.WARNING, logger="SpatialNav.Core"):
        loaded = load_nav_config(path)

    assert loaded.global_config == {"straight_only": True}
    assert loaded.sections[0].section_id == "menu"
    assert loaded.sections[0].config["enter_to"] is EnterTo.DEFAULT_ELEMENT
    assert loaded.sections[1].section_id is None
    assert loaded.sections[1].config["leave_for"] == {Direction.UP: "@menu"}
    assert loaded.default_section == "menu"
    assert "colour" in caplog.text


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2]",
        json.dumps({"global": [1]}),
        json.dumps({"sections": {"id": "x"}}),
        json.dumps({"sections": ["menu"]}),
    ],
)
def test_malformed_files_raise(tmp_path: Path, content: str) -> None:
    path = tmp_path / "nav.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigFileError):
        load_nav_config(path)


def test_apply_config_registers_sections(tmp_path: Path, host, navigator, grid) -> None:
    path = _write(
        tmp_path / "nav.json",
        {
            "global": {"restrict": "self-only"},
            "sections": [{"id": "top", "selector": "#r0c0, #r0c1, #r0c2"}, {"selector": "#r1c0, #r1c1, #r1c2"}],
            "default_section": "top",
        },
    )

    added = navigator.apply_config(load_nav_config(path))

    assert added == ["top", "section-1"]
    assert navigator.registry.default_section_id == "top"
    assert navigator.focus() is True
    assert host.current_focus() is grid["r0c0"]
    assert navigator.move("down") is False


def test_env_flag(monkeypatch) -> None:
    monkeypatch.delenv("SPATIAL_NAV_TEST_FLAG", raising=False)
    assert env_flag("SPATIAL_NAV_TEST_FLAG", True) is True
    monkeypatch.setenv("SPATIAL_NAV_TEST_FLAG", "off")
    assert env_flag("SPATIAL_NAV_TEST_FLAG", True) is False
    monkeypatch.setenv("SPATIAL_NAV_TEST_FLAG", "yes")
    assert env_flag("SPATIAL_NAV_TEST_FLAG", False) is True
