"""
pygame application for the Molecules & Light viewer.

Shows the photon emitter, the target molecule and the photons in flight, with
selectors for the light source and the target molecule and a control dock
for play/pause, single-stepping, slow motion, the emitter and reset.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
from dataclasses import dataclass, field
from typing import Optional

try:
    import pygame
except ImportError:  # pragma: no cover
    pygame = None  # type: ignore

from photon_engine import Wavelength
from molecules_light.absorption_model import ModelSnapshot, PhotonAbsorptionModel, PhotonTarget
from molecules_light.config_loader import load_model_from_yaml
from molecules_light.logging_setup import setup_logging
from .viewport import MoleculeViewport
from .panels import ControlDockPanel, SelectorPanel
from .controllers import ModelController, UIController


logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    width: int = 1280
    height: int = 720
    title: str = "Molecules & Light"
    target_fps: int = 60
    enable_vsync: bool = False


@dataclass
class AppState:
    running: bool = True
    clock: Optional["pygame.time.Clock"] = field(default=None, repr=False)


class MoleculesLightApp:
    """
    High-level pygame application manager.

    Builds the panels, routes events to the controllers, steps the model once
    per frame and renders the latest snapshot.
    """

    def __init__(self, config: AppConfig | None = None, model: Optional[PhotonAbsorptionModel] = None):
        if pygame is None:
            raise RuntimeError("pygame is not installed. Install it to run the viewer.")
        self.config = config or AppConfig()
        self.state = AppState()
        self.screen: Optional["pygame.Surface"] = None
        self.model = model or PhotonAbsorptionModel()
        self.model_controller = ModelController(self.model)
        self.ui_controller: Optional[UIController] = None
        self._latest_snapshot: Optional[ModelSnapshot] = None

    def setup(self) -> None:
        """Initialize pygame context and create root surfaces."""
        pygame.init()
        flags = pygame.SCALED if self.config.enable_vsync else 0
        self.screen = pygame.display.set_mode((self.config.width, self.config.height), flags)
        pygame.display.set_caption(self.config.title)
        self.state.clock = pygame.time.Clock()

        font = pygame.font.SysFont("Helvetica", 18)
        sidebar_width = 220
        dock_height = 120

        viewport_rect = pygame.Rect(0, 0, self.config.width - sidebar_width, self.config.height - dock_height)
        light_rect = pygame.Rect(self.config.width - sidebar_width, 0, sidebar_width, 200)
        target_rect = pygame.Rect(
            self.config.width - sidebar_width, 200, sidebar_width, self.config.height - dock_height - 200
        )
        control_rect = pygame.Rect(0, self.config.height - dock_height, self.config.width, dock_height)

        viewport = MoleculeViewport(viewport_rect)
        viewport.emission_position_pm = self.model.settings.emission_position_pm
        light_panel = SelectorPanel(
            rect=light_rect,
            font=font,
            title="Light source",
            options=[wavelength.light_source for wavelength in Wavelength],
            on_selected=self._on_light_source_selected,
            selected=self.model.light_source,
        )
        target_panel = SelectorPanel(
            rect=target_rect,
            font=font,
            title="Molecule",
            options=[target.value for target in PhotonTarget],
            on_selected=self._on_target_selected,
            selected=self.model.photon_target.value,
        )
        control_panel = ControlDockPanel(
            rect=control_rect,
            font=font,
            on_toggle_run=self.model_controller.toggle_running,
            on_step=self.model_controller.step,
            on_reset=self.model_controller.reset,
            on_toggle_emitter=self.model_controller.toggle_emitter,
            on_toggle_slow=self.model_controller.toggle_slow_motion,
        )
        self.ui_controller = UIController(
            model_controller=self.model_controller,
            viewport=viewport,
            light_panel=light_panel,
            target_panel=target_panel,
            control_panel=control_panel,
        )
        self._latest_snapshot = self.model_controller.snapshot()

    def handle_event(self, event: "pygame.event.Event") -> None:
        """Dispatch a single pygame event."""
        if event.type == pygame.QUIT:
            self.state.running = False
            return

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_SPACE:
                self.model_controller.toggle_running()
            elif event.key == pygame.K_PERIOD:
                self.model_controller.step()
            elif event.key == pygame.K_e:
                self.model_controller.toggle_emitter()

        if self.ui_controller:
            self.ui_controller.handle_event(event)

    def update(self, dt_seconds: float) -> None:
        """Advance the model and refresh panel state."""
        if self.ui_controller:
            self._latest_snapshot = self.ui_controller.update(dt_seconds)

    def render(self) -> None:
        """Render the current frame."""
        if self.screen is None or self._latest_snapshot is None or self.ui_controller is None:
            return
        self.screen.fill((10, 10, 30))
        self.ui_controller.render(self.screen, self._latest_snapshot)
        pygame.display.flip()

    def run(self) -> None:
        """Main loop entry point."""
        if self.screen is None or self.state.clock is None:
            self.setup()

        assert self.state.clock is not None
        while self.state.running:
            dt_ms = self.state.clock.tick(self.config.target_fps)
            dt_seconds = dt_ms / 1000.0
            for event in pygame.event.get():
                self.handle_event(event)
            self.update(dt_seconds)
            self.render()

        pygame.quit()

    def _on_light_source_selected(self, name: str) -> None:
        if self.ui_controller:
            self.ui_controller.select_light_source(name)

    def _on_target_selected(self, formula: str) -> None:
        if self.ui_controller:
            self.ui_controller.select_target(formula)


def main() -> None:
    parser = argparse.ArgumentParser(description="Open the Molecules & Light viewer.")
    parser.add_argument("--config", type=pathlib.Path, default=None, help="Model configuration YAML.")
    args = parser.parse_args()

    model = None
    if args.config is not None:
        bundle = load_model_from_yaml(args.config)
        setup_logging(bundle.logging)
        model = bundle.model
    else:
        setup_logging()
    app = MoleculesLightApp(model=model)
    app.run()


if __name__ == "__main__":
    main()
