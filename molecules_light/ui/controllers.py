"""
Controllers connecting the pygame viewer and the absorption model.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

try:
    import pygame
except ImportError:  # pragma: no cover
    pygame = None  # type: ignore

from photon_engine import MoleculeEvent, Wavelength
from molecules_light.absorption_model import PhotonAbsorptionModel, PhotonTarget
from .viewport import MoleculeViewport
from .panels import ControlDockPanel, SelectorPanel

if TYPE_CHECKING:  # pragma: no cover
    from molecules_light.absorption_model import ModelSnapshot

MANUAL_STEP_DT = 1.0 / 60.0


@dataclass
class ModelController:
    model: PhotonAbsorptionModel
    event_totals: Counter = field(default_factory=Counter)

    def toggle_running(self) -> None:
        self.model.running = not self.model.running

    def step(self) -> None:
        self._tally(self.model.manual_step(MANUAL_STEP_DT))

    def reset(self) -> None:
        self.model.reset()
        self.event_totals.clear()

    def toggle_emitter(self) -> None:
        self.model.set_emitter_on(not self.model.emitter_on)

    def toggle_slow_motion(self) -> None:
        self.model.slow_motion = not self.model.slow_motion

    def update(self, dt_seconds: float) -> None:
        self._tally(self.model.step(dt_seconds))

    def snapshot(self) -> "ModelSnapshot":
        return self.model.snapshot()

    def _tally(self, events: List[MoleculeEvent]) -> None:
        self.event_totals.update(event.kind.value for event in events)


class UIController:
    """
    Routes pygame events to panels and feeds them the model state.
    """

    def __init__(
        self,
        model_controller: ModelController,
        viewport: MoleculeViewport,
        light_panel: SelectorPanel,
        target_panel: SelectorPanel,
        control_panel: ControlDockPanel,
    ):
        if pygame is None:
            raise RuntimeError("pygame must be installed to use UIController.")
        self.model_controller = model_controller
        self.viewport = viewport
        self.light_panel = light_panel
        self.target_panel = target_panel
        self.control_panel = control_panel
        self._latest_snapshot: Optional["ModelSnapshot"] = None

    def handle_event(self, event: "pygame.event.Event") -> None:
        self.light_panel.handle_event(event)
        self.target_panel.handle_event(event)
        self.control_panel.handle_event(event)

    def select_light_source(self, name: str) -> None:
        self.model_controller.model.set_photon_wavelength(Wavelength.from_light_source(name))

    def select_target(self, formula: str) -> None:
        self.model_controller.model.set_photon_target(PhotonTarget.from_formula(formula))

    def update(self, dt_seconds: float) -> "ModelSnapshot":
        self.model_controller.update(dt_seconds)
        snapshot = self.model_controller.snapshot()
        self._latest_snapshot = snapshot
        model = self.model_controller.model
        self.light_panel.selected = snapshot.light_source
        self.target_panel.selected = snapshot.photon_target
        self.control_panel.is_running = model.running
        self.control_panel.emitter_on = model.emitter_on
        self.control_panel.slow_motion = model.slow_motion
        totals = self.model_controller.event_totals
        self.control_panel.status_lines = [
            f"Time: {snapshot.time_s:.1f} s   Photons: {len(snapshot.photons)}   Molecules: {len(snapshot.molecules)}",
            ", ".join(f"{kind}: {count}" for kind, count in sorted(totals.items())) or "No events yet",
        ]
        return snapshot

    def render(self, screen: "pygame.Surface", snapshot: "ModelSnapshot") -> None:
        viewport_surface = screen.subsurface(self.viewport.rect)
        self.viewport.render(viewport_surface, snapshot)
        self.light_panel.render(screen)
        self.target_panel.render(screen)
        self.control_panel.render(screen)
