"""
Shared pytest fixtures for the photon-absorption engine and model.

Besides parsed configuration files this provides a scripted random source so
absorption decisions, hold times and emission angles can be fixed per test.
"""

from __future__ import annotations

import pathlib
import sys
from typing import Any, Callable, Dict, Iterable, List

import pytest
import yaml

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class ScriptedRandom:
    """Stand-in for random.Random that replays a fixed list of draws."""

    def __init__(self, values: Iterable[float], default: float = 0.0):
        self.values: List[float] = list(values)
        self.default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


@pytest.fixture
def scripted_random() -> Callable[..., ScriptedRandom]:
    """Factory: scripted_random(0.1, 0.5, default=0.9)."""

    def factory(*values: float, default: float = 0.0) -> ScriptedRandom:
        return ScriptedRandom(values, default=default)

    return factory


@pytest.fixture(scope="session")
def project_root() -> pathlib.Path:
    """Return repository root directory."""
    return REPO_ROOT


def _load_yaml(path: pathlib.Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)  # type: ignore[no-any-return]


@pytest.fixture(scope="session")
def default_config(project_root: pathlib.Path) -> Dict[str, Any]:
    """Parsed representation of the default model configuration."""
    return _load_yaml(project_root / "config" / "default.yaml")


@pytest.fixture(scope="session")
def preset_paths(project_root: pathlib.Path) -> List[pathlib.Path]:
    return sorted((project_root / "config" / "presets").glob("*.yaml"))
