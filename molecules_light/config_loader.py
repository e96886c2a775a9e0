"""
Utilities for loading photon-absorption models from YAML configuration files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml

from photon_engine import Wavelength
from molecules_light.absorption_model import (
    ModelSettings,
    PhotonAbsorptionModel,
    PhotonTarget,
)


logger = logging.getLogger(__name__)


@dataclass
class ModelBundle:
    """Container returned by configuration loader."""

    model: PhotonAbsorptionModel
    metadata: Dict[str, Any]
    logging: Dict[str, Any] = field(default_factory=dict)


def load_model_from_yaml(path: Path, *, seed: Optional[int] = None) -> ModelBundle:
    """Load a PhotonAbsorptionModel plus associated metadata from a YAML config."""
    data = load_yaml_config(path)
    try:
        settings = build_settings(data.get("model") or {})
    except ValueError as exc:
        raise ValueError(f"Invalid model section in {path}: {exc}") from exc
    if seed is not None:
        settings.seed = seed
    model = PhotonAbsorptionModel(settings)
    logger.info(
        f"Loaded model from {path}: target {settings.initial_target.value}, "
        f"light {settings.initial_wavelength.light_source}, emitter {'on' if settings.emitter_on else 'off'}."
    )
    return ModelBundle(
        model=model,
        metadata=data.get("metadata") or {},
        logging=data.get("logging") or {},
    )


def load_yaml_config(path: Path) -> Dict[str, Any]:
    path = Path(path)
    if not path.is_file():
        logger.error(f"Configuration file not found: {path}")
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle)
    if not isinstance(content, dict):
        raise ValueError(f"YAML file {path} must contain a mapping at the root.")
    return content


def build_settings(config: Dict[str, Any]) -> ModelSettings:
    defaults = ModelSettings()
    bounds = config.get("region_bounds_pm")
    seed = config.get("seed")
    return ModelSettings(
        emission_period_s=float(config.get("emission_period_s", defaults.emission_period_s)),
        photon_speed_pm_s=float(config.get("photon_speed_pm_s", defaults.photon_speed_pm_s)),
        emission_position_pm=_tuple2(config.get("emission_position_pm", defaults.emission_position_pm)),
        region_bounds_pm=_bounds(bounds) if bounds is not None else defaults.region_bounds_pm,
        slow_speed_factor=float(config.get("slow_speed_factor", defaults.slow_speed_factor)),
        max_step_s=float(config.get("max_step_s", defaults.max_step_s)),
        seed=int(seed) if seed is not None else None,
        initial_target=PhotonTarget.from_formula(str(config.get("target", defaults.initial_target.value))),
        initial_wavelength=Wavelength.from_light_source(
            str(config.get("light_source", defaults.initial_wavelength.light_source))
        ),
        emitter_on=bool(config.get("emitter_on", defaults.emitter_on)),
    )


def _tuple2(value: Any) -> Tuple[float, float]:
    if not isinstance(value, Iterable) or isinstance(value, str):
        raise ValueError("Vector field must be iterable with 2 numbers.")
    values = list(value)
    if len(values) != 2:
        raise ValueError("Vector field must contain exactly 2 entries.")
    return float(values[0]), float(values[1])


def _bounds(value: Any) -> Tuple[float, float, float, float]:
    if not isinstance(value, Iterable) or isinstance(value, str):
        raise ValueError("region_bounds_pm must be a list of 4 numbers.")
    values = [float(v) for v in value]
    if len(values) != 4:
        raise ValueError("region_bounds_pm must contain exactly 4 entries.")
    min_x, min_y, max_x, max_y = values
    if min_x >= max_x or min_y >= max_y:
        raise ValueError("region_bounds_pm must be ordered as [min_x, min_y, max_x, max_y].")
    return min_x, min_y, max_x, max_y
