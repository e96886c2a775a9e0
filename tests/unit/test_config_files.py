"""
Schema-oriented tests for the shipped configuration files.

These give an early warning when a preset drifts away from the keys the
loader understands.
"""

from __future__ import annotations

from typing import Set

import yaml

KNOWN_MODEL_KEYS: Set[str] = {
    "target",
    "light_source",
    "emitter_on",
    "emission_period_s",
    "photon_speed_pm_s",
    "emission_position_pm",
    "region_bounds_pm",
    "slow_speed_factor",
    "max_step_s",
    "seed",
}


def test_default_config_sections(default_config) -> None:
    required_sections = {"metadata", "model", "logging"}
    assert required_sections.issubset(
        default_config
    ), f"Missing sections: {required_sections - set(default_config)}"


def test_default_config_lists_every_model_key(default_config) -> None:
    assert set(default_config["model"]) == KNOWN_MODEL_KEYS


def test_presets_only_use_known_keys(preset_paths) -> None:
    for path in preset_paths:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
        assert {"metadata", "model"} <= data.keys(), path.name
        assert set(data["model"]) <= KNOWN_MODEL_KEYS, path.name
        assert data["metadata"].get("name"), path.name
