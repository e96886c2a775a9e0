"""
Viewport rendering helpers for the pygame viewer.

The viewport consumes `ModelSnapshot` objects from the absorption model and
draws molecules (atoms, bonds, a glow for excited molecules) and photons
using basic pygame primitives. World coordinates are picometres with y up.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

try:
    import pygame
except ImportError:  # pragma: no cover
    pygame = None  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from molecules_light.absorption_model import ModelSnapshot

Color = Tuple[int, int, int]


PHOTON_COLORS: Dict[str, Color] = {
    "microwave": (160, 160, 160),
    "infrared": (230, 60, 40),
    "visible": (255, 230, 0),
    "ultraviolet": (170, 80, 255),
}


@dataclass
class ViewportConfig:
    width: int
    height: int
    background_color: Color = (0, 0, 0)
    bond_color: Color = (190, 190, 190)
    glow_color: Color = (255, 140, 40)
    photon_radius_px: int = 6
    emitter_color: Color = (120, 120, 140)
    photon_colors: Dict[str, Color] = field(default_factory=lambda: PHOTON_COLORS.copy())


class MoleculeViewport:
    """
    Manages world-to-screen transforms and rendering calls for the molecule view.
    """

    def __init__(self, rect: "pygame.Rect", config: Optional[ViewportConfig] = None):
        if pygame is None:
            raise RuntimeError("pygame must be installed to use MoleculeViewport.")
        self.rect = rect
        self.config = config or ViewportConfig(width=rect.width, height=rect.height)
        self.zoom_pm_to_px = min(rect.width / 3000.0, rect.height / 2000.0)
        self.emission_position_pm: Tuple[float, float] = (-1350.0, 0.0)

    def world_to_screen(self, position_pm: Tuple[float, float]) -> Tuple[int, int]:
        px = int(position_pm[0] * self.zoom_pm_to_px) + self.rect.width // 2
        py = int(-position_pm[1] * self.zoom_pm_to_px) + self.rect.height // 2
        return px, py

    def render(self, surface: "pygame.Surface", snapshot: "ModelSnapshot") -> None:
        surface.fill(self.config.background_color)
        if pygame is None:
            return

        emitter_px = self.world_to_screen(self.emission_position_pm)
        emitter_rect = pygame.Rect(0, 0, 36, 20)
        emitter_rect.midright = emitter_px
        color = self.config.photon_colors.get(snapshot.light_source, self.config.emitter_color)
        pygame.draw.rect(surface, color if snapshot.emitter_on else self.config.emitter_color, emitter_rect)

        for molecule in snapshot.molecules:
            self._draw_molecule(surface, molecule)

        for photon in snapshot.photons:
            pos_px = self.world_to_screen(photon.position_pm)
            photon_color = self.config.photon_colors.get(photon.wavelength, (255, 255, 255))
            pygame.draw.circle(surface, photon_color, pos_px, self.config.photon_radius_px)

    def _draw_molecule(self, surface: "pygame.Surface", molecule: Dict[str, Any]) -> None:
        atoms = {atom["unique_id"]: atom for atom in molecule["atoms"]}
        if molecule["high_electronic_energy_state"]:
            center_px = self.world_to_screen(tuple(molecule["center_of_gravity"]))
            pygame.draw.circle(surface, self.config.glow_color, center_px, int(220 * self.zoom_pm_to_px), width=4)

        # Bonds first so atoms sit on top.
        for bond in molecule["atomic_bonds"]:
            atom_a = atoms.get(bond["atom1_id"])
            atom_b = atoms.get(bond["atom2_id"])
            if atom_a is None or atom_b is None:
                continue
            start = self.world_to_screen(tuple(atom_a["position"]))
            end = self.world_to_screen(tuple(atom_b["position"]))
            self._draw_bond(surface, start, end, bond["bond_count"])

        for atom in atoms.values():
            pos_px = self.world_to_screen(tuple(atom["position"]))
            radius = max(2, int(atom["radius_pm"] * self.zoom_pm_to_px))
            pygame.draw.circle(surface, tuple(atom["color"]), pos_px, radius)

    def _draw_bond(self, surface: "pygame.Surface", start: Tuple[int, int], end: Tuple[int, int], order: int) -> None:
        dx = end[0] - start[0]
        dy = end[1] - start[1]
        length = math.hypot(dx, dy)
        if length == 0:
            return
        color = self.config.bond_color
        if order <= 1:
            pygame.draw.line(surface, color, start, end, width=3)
            return

        ux = -dy / length
        uy = dx / length
        spacing = 6
        center_index = (order - 1) / 2.0
        for idx in range(order):
            offset = (idx - center_index) * spacing
            offset_start = (int(start[0] + ux * offset), int(start[1] + uy * offset))
            offset_end = (int(end[0] + ux * offset), int(end[1] + uy * offset))
            pygame.draw.line(surface, color, offset_start, offset_end, width=3)
