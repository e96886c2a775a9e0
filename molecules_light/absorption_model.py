"""
Headless photon-absorption model.

Drives one frame at a time: a photon emitter on the left fires horizontally
at the active molecules, every photon is offered to every molecule before it
moves, and the events the molecules record are applied afterwards (absorbed
photons disappear, re-emitted photons join the flight list, a molecule that
broke apart is replaced by its two products).
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from photon_engine import (
    PHOTON_EMISSION_SPEED,
    EventKind,
    Molecule,
    MoleculeEvent,
    Photon,
    Vector,
    Wavelength,
)
from molecules_light.molecules import CH4, CO, CO2, H2O, N2, NO2, O2, O3


logger = logging.getLogger(__name__)

EMITTER_ON_EMISSION_PERIOD = 0.8  # seconds
EMITTER_OFF_EMISSION_PERIOD = math.inf
INITIAL_COUNTDOWN_WHEN_EMISSION_ENABLED = 0.0  # first photon leaves right away
MAX_STEP_DT = 0.2  # larger steps are dropped, e.g. after the window was hidden
SLOW_SPEED_FACTOR = 0.5

Bounds = Tuple[float, float, float, float]


class PhotonTarget(Enum):
    """Molecules the emitter can be aimed at."""

    SINGLE_CO_MOLECULE = "CO"
    SINGLE_N2_MOLECULE = "N2"
    SINGLE_O2_MOLECULE = "O2"
    SINGLE_CO2_MOLECULE = "CO2"
    SINGLE_CH4_MOLECULE = "CH4"
    SINGLE_H2O_MOLECULE = "H2O"
    SINGLE_NO2_MOLECULE = "NO2"
    SINGLE_O3_MOLECULE = "O3"

    @property
    def molecule_type(self) -> Type[Molecule]:
        return _TARGET_TYPES[self]

    @classmethod
    def from_formula(cls, formula: str) -> "PhotonTarget":
        for target in cls:
            if target.value.lower() == formula.strip().lower():
                return target
        raise ValueError(f"Unknown photon target {formula!r}.")


_TARGET_TYPES: Dict[PhotonTarget, Type[Molecule]] = {
    PhotonTarget.SINGLE_CO_MOLECULE: CO,
    PhotonTarget.SINGLE_N2_MOLECULE: N2,
    PhotonTarget.SINGLE_O2_MOLECULE: O2,
    PhotonTarget.SINGLE_CO2_MOLECULE: CO2,
    PhotonTarget.SINGLE_CH4_MOLECULE: CH4,
    PhotonTarget.SINGLE_H2O_MOLECULE: H2O,
    PhotonTarget.SINGLE_NO2_MOLECULE: NO2,
    PhotonTarget.SINGLE_O3_MOLECULE: O3,
}


@dataclass
class ModelSettings:
    emission_period_s: float = EMITTER_ON_EMISSION_PERIOD
    photon_speed_pm_s: float = PHOTON_EMISSION_SPEED
    emission_position_pm: Vector = (-1350.0, 0.0)
    # (min_x, min_y, max_x, max_y); photons leaving this box are dropped.
    region_bounds_pm: Bounds = (-1500.0, -1000.0, 1500.0, 1000.0)
    slow_speed_factor: float = SLOW_SPEED_FACTOR
    max_step_s: float = MAX_STEP_DT
    seed: Optional[int] = None
    initial_target: PhotonTarget = PhotonTarget.SINGLE_CO_MOLECULE
    initial_wavelength: Wavelength = Wavelength.INFRARED
    emitter_on: bool = False


@dataclass
class PhotonState:
    wavelength: str
    position_pm: Vector
    velocity_pm_s: Vector


@dataclass
class ModelSnapshot:
    time_s: float
    light_source: str
    photon_target: str
    emitter_on: bool
    photons: List[PhotonState] = field(default_factory=list)
    molecules: List[Dict[str, Any]] = field(default_factory=list)


class PhotonAbsorptionModel:
    """
    Frame driver for the photon-absorption engine.

    One random source is shared by the model, its molecules and their
    strategies, so a seeded model replays identically for the same dt
    sequence.
    """

    def __init__(self, settings: Optional[ModelSettings] = None, rng: Optional[random.Random] = None):
        self.settings = settings or ModelSettings()
        self.random = rng if rng is not None else random.Random(self.settings.seed)
        self.photons: List[Photon] = []
        self.active_molecules: List[Molecule] = []
        self.target_molecule: Optional[Molecule] = None
        self.photon_target = self.settings.initial_target
        self.photon_wavelength = self.settings.initial_wavelength
        self.running = True
        self.slow_motion = False
        self.emitter_on = False
        self.photon_emission_countdown_timer = math.inf
        self.photon_emission_period_target = EMITTER_OFF_EMISSION_PERIOD
        self.time_s = 0.0

        self._update_active_molecule(self.photon_target)
        if self.settings.emitter_on:
            self.set_emitter_on(True)

    # -- controls ----------------------------------------------------------

    @property
    def light_source(self) -> str:
        return self.photon_wavelength.light_source

    def reset(self) -> None:
        self.reset_photons()
        self.photon_target = self.settings.initial_target
        self.restore_active_molecule()
        self.set_photon_emission_period(EMITTER_OFF_EMISSION_PERIOD)
        self.emitter_on = False
        self.photon_wavelength = self.settings.initial_wavelength
        self.running = True
        self.slow_motion = False
        self.time_s = 0.0
        if self.settings.emitter_on:
            self.set_emitter_on(True)
        logger.info(f"Model reset, target {self.photon_target.value}, light {self.light_source}.")

    def reset_photons(self) -> None:
        self.photons.clear()

    def set_emitter_on(self, emitter_on: bool) -> None:
        self.emitter_on = emitter_on
        self.set_photon_emission_period(
            self.settings.emission_period_s if emitter_on else EMITTER_OFF_EMISSION_PERIOD
        )

    def set_photon_wavelength(self, wavelength: Wavelength) -> None:
        if wavelength is self.photon_wavelength:
            return
        self.photon_wavelength = wavelength
        self.reset_photons()
        if self.emitter_on:
            self.set_emission_timer_to_initial_countdown()
        logger.info(f"Light source set to {wavelength.light_source}.")

    def set_photon_emission_period(self, period: float) -> None:
        if self.photon_emission_period_target == period:
            return
        if math.isinf(self.photon_emission_period_target) and not math.isinf(period) and not self.photons:
            self.set_emission_timer_to_initial_countdown()
        elif period < self.photon_emission_countdown_timer:
            self.photon_emission_countdown_timer = period
        elif math.isinf(period):
            self.photon_emission_countdown_timer = period
        self.photon_emission_period_target = period

    def set_emission_timer_to_initial_countdown(self) -> None:
        self.photon_emission_countdown_timer = INITIAL_COUNTDOWN_WHEN_EMISSION_ENABLED

    def set_photon_target(self, target: PhotonTarget) -> None:
        self.photon_target = target
        self._update_active_molecule(target)
        logger.info(f"Photon target set to {target.value}.")

    def restore_active_molecule(self) -> None:
        """Rebuild the current target, e.g. after it broke apart."""
        self._update_active_molecule(self.photon_target)

    def has_both_constituent_molecules(self, molecule_a: Molecule, molecule_b: Molecule) -> bool:
        return self._is_active(molecule_a) and self._is_active(molecule_b)

    # -- stepping ----------------------------------------------------------

    def step(self, dt: float) -> List[MoleculeEvent]:
        """Advance the model by dt seconds of wall time; returns the tick's molecule events."""
        if dt > self.settings.max_step_s:
            return []
        if self.slow_motion:
            dt *= self.settings.slow_speed_factor
        if not self.running:
            return []
        self.step_photons(dt)
        self.check_emission_timer(dt)
        return self._finish_tick(dt)

    def manual_step(self, dt: float) -> List[MoleculeEvent]:
        """Single step used while paused."""
        self.check_emission_timer(dt)
        self.step_photons(dt)
        return self._finish_tick(dt)

    def _finish_tick(self, dt: float) -> List[MoleculeEvent]:
        events = self.step_molecules(dt)
        self._remove_escaped_photons()
        self.time_s += dt
        return events

    def check_emission_timer(self, dt: float) -> None:
        if math.isinf(self.photon_emission_countdown_timer):
            return
        self.photon_emission_countdown_timer -= dt
        if self.photon_emission_countdown_timer <= 0:
            self.emit_photon(abs(self.photon_emission_countdown_timer))
            self.photon_emission_countdown_timer = self.photon_emission_period_target

    def emit_photon(self, advance_amount: float = 0.0) -> Photon:
        """Fire a photon to the right, moved along its path by advance_amount seconds."""
        speed = self.settings.photon_speed_pm_s
        start_x, start_y = self.settings.emission_position_pm
        photon = Photon(
            self.photon_wavelength,
            position=(start_x + speed * advance_amount, start_y),
            velocity=(speed, 0.0),
        )
        self.photons.append(photon)
        return photon

    def step_photons(self, dt: float) -> None:
        absorbed: List[Photon] = []
        for photon in self.photons:
            for molecule in self.active_molecules:
                if molecule.query_absorb_photon(photon):
                    absorbed.append(photon)
                    break
            photon.step(dt)
        for photon in absorbed:
            self._remove_photon(photon)

    def step_molecules(self, dt: float) -> List[MoleculeEvent]:
        events: List[MoleculeEvent] = []
        for molecule in list(self.active_molecules):
            events.extend(molecule.step(dt))
        for event in events:
            self._apply_event(event)
        return events

    def _apply_event(self, event: MoleculeEvent) -> None:
        if event.kind is EventKind.PHOTON_EMITTED and event.photon is not None:
            self.photons.append(event.photon)
        elif event.kind is EventKind.PHOTON_ABSORBED and event.photon is not None:
            self._remove_photon(event.photon)
        elif event.kind is EventKind.BROKE_APART:
            self._replace_broken_molecule(event.molecule, event.products)

    def _replace_broken_molecule(self, molecule: Molecule, products: Tuple[Molecule, ...]) -> None:
        if self._is_active(molecule):
            self.active_molecules = [m for m in self.active_molecules if m is not molecule]
        if self.target_molecule is molecule:
            self.target_molecule = None
        molecule.dispose()
        self.active_molecules.extend(products)
        logger.info(f"{molecule!r} broke apart into {', '.join(repr(p) for p in products)}.")

    def _remove_photon(self, photon: Photon) -> None:
        self.photons = [p for p in self.photons if p is not photon]

    def _remove_escaped_photons(self) -> None:
        min_x, min_y, max_x, max_y = self.settings.region_bounds_pm
        self.photons = [
            photon
            for photon in self.photons
            if min_x <= photon.position[0] <= max_x and min_y <= photon.position[1] <= max_y
        ]

    def _update_active_molecule(self, target: PhotonTarget) -> None:
        for molecule in self.active_molecules:
            molecule.dispose()
        molecule = target.molecule_type(rng=self.random)
        self.active_molecules = [molecule]
        self.target_molecule = molecule

    def _is_active(self, molecule: Molecule) -> bool:
        return any(active is molecule for active in self.active_molecules)

    # -- inspection --------------------------------------------------------

    def snapshot(self) -> ModelSnapshot:
        return ModelSnapshot(
            time_s=self.time_s,
            light_source=self.light_source,
            photon_target=self.photon_target.value,
            emitter_on=self.emitter_on,
            photons=[
                PhotonState(
                    wavelength=photon.wavelength.light_source,
                    position_pm=photon.position,
                    velocity_pm_s=photon.velocity,
                )
                for photon in self.photons
            ],
            molecules=[molecule.to_state_object() for molecule in self.active_molecules],
        )
