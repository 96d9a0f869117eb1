from __future__ import annotations

import json
import logging
from pathlib import Path

from spatial_nav import trace_cli
from spatial_nav.logging_utils import LOG_DIR_ENV_VAR, LOGGER_NAME

LAYOUT = {
    "elements": [
        {"id": "a", "rect": [0, 0, 100, 40], "classes": ["top"]},
        {"id": "b", "rect": [120, 0, 100, 40], "classes": ["top"]},
        {"id": "c", "rect": [0, 60, 100, 40], "classes": ["bottom"]},
    ]
}


def _write(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_trace_prints_focus_trail(tmp_path: Path, capsys) -> None:
    layout = _write(tmp_path / "layout.json", LAYOUT)

    code = trace_cli.main([str(layout), "--start", "a", "right", "down", "left"])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out[0] == "start: <MemoryElement #a>"
    assert out[1] == "right: <MemoryElement #b>"
    assert out[-1] == "left: <MemoryElement #c>"


def test_trace_reports_blocked_moves(tmp_path: Path, capsys) -> None:
    layout = _write(tmp_path / "layout.json", LAYOUT)
    config = _write(
        tmp_path / "nav.json",
        {
            "sections": [
                {"id": "top", "selector": ".top", "leaveFor": {"down": ""}},
                {"id": "bottom", "selector": ".bottom"},
            ],
            "default_section": "top",
        },
    )

    code = trace_cli.main([str(layout), "--config", str(config), "down"])

    out = capsys.readouterr().out
    assert code == 0
    assert "no target down of <MemoryElement #a>" in out
    assert "down: <MemoryElement #a>" in out


def test_trace_rejects_unknown_inputs(tmp_path: Path, capsys) -> None:
    layout = _write(tmp_path / "layout.json", LAYOUT)

    assert trace_cli.main([str(layout), "--start", "zz"]) == 2
    assert trace_cli.main([str(layout), "sideways"]) == 2
    assert trace_cli.main([str(tmp_path / "missing.json")]) == 2
    assert "unknown direction 'sideways'" in capsys.readouterr().err


def test_trace_accepts_moves_after_options(tmp_path: Path, capsys) -> None:
    layout = _write(tmp_path / "layout.json", LAYOUT)

    code = trace_cli.main([str(layout), "right", "--start", "a", "down"])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out == [
        "start: <MemoryElement #a>",
        "right: <MemoryElement #b>",
        "down: <MemoryElement #c>",
    ]


def test_trace_verbose_prints_debug_logs(tmp_path: Path, capsys) -> None:
    layout = _write(tmp_path / "layout.json", LAYOUT)

    code = trace_cli.main([str(layout), "--verbose", "--start", "a", "right"])

    captured = capsys.readouterr()
    assert code == 0
    assert "DEBUG SpatialNav.Core: Moving right from <MemoryElement #a> to <MemoryElement #b>" in captured.err
    assert "  sn:willmove <MemoryElement #a>" in captured.out
    logger = logging.getLogger(LOGGER_NAME)
    assert logger.level == logging.INFO
    assert not logger.handlers


def test_trace_log_file_writes_under_log_dir(tmp_path: Path, monkeypatch, capsys) -> None:
    layout = _write(tmp_path / "layout.json", LAYOUT)
    monkeypatch.setenv(LOG_DIR_ENV_VAR, str(tmp_path / "logs"))

    code = trace_cli.main([str(layout), "--log-file", "--start", "a", "down"])

    capsys.readouterr()
    log_path = tmp_path / "logs" / "SpatialNavTrace" / trace_cli.LOG_FILENAME
    assert code == 0
    assert "Moving down from <MemoryElement #a> to <MemoryElement #c>" in log_path.read_text(encoding="utf-8")
    assert not logging.getLogger(LOGGER_NAME).handlers
