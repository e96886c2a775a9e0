"""Smoke tests for the headless runner and logging setup."""

from __future__ import annotations

import argparse
import json
import logging
import logging.handlers

import pytest

from photon_engine import EventKind
from molecules_light.logging_setup import setup_logging
from scripts.run_headless import run


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_adds_rotating_file_handler(tmp_path, restore_root_logging) -> None:
    log_file = tmp_path / "logs" / "run.log"
    setup_logging({"level": "debug", "log_file": str(log_file)})

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
    assert log_file.parent.is_dir()


def test_setup_logging_level_override(restore_root_logging) -> None:
    setup_logging({"level": "DEBUG"}, level_override="warning")
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1


def test_headless_run_counts_events(project_root, tmp_path, restore_root_logging) -> None:
    state_out = tmp_path / "state.json"
    args = argparse.Namespace(
        config=project_root / "config" / "presets" / "ozone_ultraviolet.yaml",
        frames=240,
        dt=1.0 / 60.0,
        seed=3,
        target=None,
        light_source=None,
        slow=False,
        state_out=state_out,
        log_level="WARNING",
    )

    totals = run(args)

    assert set(totals) == set(EventKind)
    assert all(count >= 0 for count in totals.values())
    snapshot = json.loads(state_out.read_text(encoding="utf-8"))
    assert snapshot["photon_target"] == "O3"
    assert snapshot["light_source"] == "ultraviolet"
    assert snapshot["time_s"] == pytest.approx(4.0)
