"""
Photon-absorption engine for the Molecules & Light simulation.

Unit conventions:
    - Positions and offsets: picometres (pm)
    - Velocities: pm / second
    - Time step: seconds of simulation time
    - Angles: radians
    - Wavelengths: metres (only used as enum values)

A molecule is a rigid arrangement of atoms around a centre of gravity. Each
atom has a relaxed offset from that centre plus a vibration offset; the atom
positions are recomputed from these whenever the centre, the rotation or the
vibration changes. Photon interaction is decided by one absorption strategy
per wavelength, and at most one strategy is active at a time. Everything the
host needs to react to (absorption, emission, pass-through, dissociation) is
recorded as a MoleculeEvent and handed back from `Molecule.step`.
"""

from __future__ import annotations

import logging
import math
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from types import MappingProxyType
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from molecules_light.atom_data import get_atom_properties


logger = logging.getLogger(__name__)

Vector = Tuple[float, float]
Color = Tuple[int, int, int]

PHOTON_EMISSION_SPEED = 3000.0  # pm/s, same as the model's emitter
PHOTON_ABSORPTION_DISTANCE = 100.0  # pm, strict upper bound for a query
VIBRATION_FREQUENCY = 5.0  # cycles per second of sim time
ROTATION_RATE = 1.1  # revolutions per second of sim time
ABSORPTION_HYSTERESIS_TIME = 0.2  # seconds
PASS_THROUGH_PHOTON_LIST_SIZE = 10
DEFAULT_ABSORPTION_PROBABILITY = 0.5
MIN_PHOTON_HOLD_TIME = 1.1  # seconds
MAX_PHOTON_HOLD_TIME = 1.3  # seconds
TWO_PI = 2.0 * math.pi

# Shared by every molecule and strategy unless a host injects its own source.
SHARED_RANDOM = random.Random()


def vector_add(a: Vector, b: Vector) -> Vector:
    return (a[0] + b[0], a[1] + b[1])


def vector_sub(a: Vector, b: Vector) -> Vector:
    return (a[0] - b[0], a[1] - b[1])


def vector_scale(v: Vector, scalar: float) -> Vector:
    return (v[0] * scalar, v[1] * scalar)


def vector_distance(a: Vector, b: Vector) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def vector_rotate(v: Vector, radians: float) -> Vector:
    cos_a = math.cos(radians)
    sin_a = math.sin(radians)
    return (v[0] * cos_a - v[1] * sin_a, v[0] * sin_a + v[1] * cos_a)


def vector_from_polar(magnitude: float, angle: float) -> Vector:
    return (magnitude * math.cos(angle), magnitude * math.sin(angle))


def vector_zero() -> Vector:
    return (0.0, 0.0)


def _tuple2(value: Any) -> Vector:
    values = list(value)
    if len(values) != 2:
        raise ValueError(f"Expected a 2D vector, got {value!r}.")
    return float(values[0]), float(values[1])


class Wavelength(Enum):
    """Photon wavelength bands, valued in metres."""

    MICRO = 0.2
    INFRARED = 850e-9
    VISIBLE = 580e-9
    ULTRAVIOLET = 100e-9

    @property
    def light_source(self) -> str:
        return _LIGHT_SOURCE_NAMES[self]

    @classmethod
    def from_light_source(cls, name: str) -> "Wavelength":
        key = name.strip().lower()
        for wavelength, source in _LIGHT_SOURCE_NAMES.items():
            if source == key or wavelength.name.lower() == key:
                return wavelength
        raise ValueError(f"Unknown light source {name!r}.")


_LIGHT_SOURCE_NAMES: Dict[Wavelength, str] = {
    Wavelength.MICRO: "microwave",
    Wavelength.INFRARED: "infrared",
    Wavelength.VISIBLE: "visible",
    Wavelength.ULTRAVIOLET: "ultraviolet",
}


class Photon:
    """A point moving in a straight line. Compared by identity."""

    def __init__(
        self,
        wavelength: Wavelength,
        position: Vector = (0.0, 0.0),
        velocity: Vector = (0.0, 0.0),
    ):
        self._wavelength = wavelength
        self.position: Vector = (float(position[0]), float(position[1]))
        self.velocity: Vector = (float(velocity[0]), float(velocity[1]))

    @property
    def wavelength(self) -> Wavelength:
        return self._wavelength

    def step(self, dt: float) -> None:
        self.position = (
            self.position[0] + self.velocity[0] * dt,
            self.position[1] + self.velocity[1] * dt,
        )

    def __repr__(self) -> str:
        return (
            f"Photon({self._wavelength.light_source}, position=({self.position[0]:.1f}, "
            f"{self.position[1]:.1f}))"
        )


_atom_ids = count(1)


@dataclass(eq=False)
class Atom:
    symbol: str
    color: Color
    radius_pm: float
    mass_amu: float
    unique_id: int = field(default_factory=lambda: next(_atom_ids))
    position: Vector = field(default_factory=vector_zero)
    top_layer: bool = False

    @classmethod
    def of(cls, symbol: str, *, top_layer: bool = False) -> "Atom":
        props = get_atom_properties(symbol)
        return cls(
            symbol=symbol,
            color=tuple(props["color"]),  # type: ignore[arg-type]
            radius_pm=float(props["radius_pm"]),
            mass_amu=float(props["mass_amu"]),
            top_layer=top_layer,
        )

    @classmethod
    def carbon(cls, **kwargs: Any) -> "Atom":
        return cls.of("C", **kwargs)

    @classmethod
    def hydrogen(cls, **kwargs: Any) -> "Atom":
        return cls.of("H", **kwargs)

    @classmethod
    def nitrogen(cls, **kwargs: Any) -> "Atom":
        return cls.of("N", **kwargs)

    @classmethod
    def oxygen(cls, **kwargs: Any) -> "Atom":
        return cls.of("O", **kwargs)

    def to_state_object(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "color": list(self.color),
            "radius_pm": self.radius_pm,
            "mass_amu": self.mass_amu,
            "unique_id": self.unique_id,
            "position": list(self.position),
        }

    @classmethod
    def from_state_object(cls, state: Mapping[str, Any]) -> "Atom":
        return cls(
            symbol=str(state["symbol"]),
            color=tuple(int(c) for c in state["color"]),  # type: ignore[arg-type]
            radius_pm=float(state["radius_pm"]),
            mass_amu=float(state["mass_amu"]),
            unique_id=int(state["unique_id"]),
            position=_tuple2(state["position"]),
        )


@dataclass(eq=False)
class AtomicBond:
    atom1: Atom
    atom2: Atom
    bond_count: int = 1
    top_layer: bool = False

    def to_state_object(self) -> Dict[str, Any]:
        return {
            "atom1_id": self.atom1.unique_id,
            "atom2_id": self.atom2.unique_id,
            "bond_count": self.bond_count,
        }


class EventKind(Enum):
    PHOTON_ABSORBED = "photon_absorbed"
    PHOTON_EMITTED = "photon_emitted"
    PHOTON_PASSED_THROUGH = "photon_passed_through"
    BROKE_APART = "broke_apart"


@dataclass(frozen=True)
class MoleculeEvent:
    kind: EventKind
    molecule: "Molecule"
    photon: Optional[Photon] = None
    products: Tuple["Molecule", ...] = ()


# ---------------------------------------------------------------------------
# Absorption strategies
# ---------------------------------------------------------------------------


class PhotonAbsorptionStrategy:
    """
    Reaction policy of one molecule to photons of one wavelength.

    Decides whether an offered photon is absorbed and drives the molecule's
    response (timers, flags) while it is the molecule's active strategy.
    A photon is only ever offered once; the molecule remembers declined ones.
    """

    absorption_probability: float = DEFAULT_ABSORPTION_PROBABILITY

    def __init__(self, molecule: "Molecule"):
        self.molecule = molecule
        self.is_photon_absorbed = False
        self.photon_hold_countdown_time = 0.0

    def reset(self) -> None:
        self.is_photon_absorbed = False
        self.photon_hold_countdown_time = 0.0

    def query_and_absorb_photon(self, photon: Photon) -> bool:
        rng = self.molecule.rng
        absorbed = (not self.is_photon_absorbed) and rng.random() < self.absorption_probability
        if absorbed:
            self.is_photon_absorbed = True
            self.photon_hold_countdown_time = self._draw_hold_time()
        return absorbed

    def _draw_hold_time(self) -> float:
        return MIN_PHOTON_HOLD_TIME + self.molecule.rng.random() * (MAX_PHOTON_HOLD_TIME - MIN_PHOTON_HOLD_TIME)

    def step(self, dt: float) -> None:
        raise NotImplementedError(f"{type(self).__name__} must implement step().")


class NullPhotonAbsorptionStrategy(PhotonAbsorptionStrategy):
    """Never absorbs. The ground state of every molecule."""

    def query_and_absorb_photon(self, photon: Photon) -> bool:
        return False

    def step(self, dt: float) -> None:
        pass


class PhotonHoldStrategy(PhotonAbsorptionStrategy):
    """Holds an absorbed photon for the hold time, then re-emits it."""

    def __init__(self, molecule: "Molecule"):
        super().__init__(molecule)
        self.absorbed_wavelength: Optional[Wavelength] = None

    def step(self, dt: float) -> None:
        self.photon_hold_countdown_time -= dt
        if self.photon_hold_countdown_time <= 0:
            self.reemit_photon()

    def reemit_photon(self) -> None:
        if self.absorbed_wavelength is None:
            raise RuntimeError("reemit_photon called before a photon was absorbed.")
        self.molecule.emit_photon(self.absorbed_wavelength)
        self.molecule.clear_active_strategy()
        self.is_photon_absorbed = False

    def query_and_absorb_photon(self, photon: Photon) -> bool:
        absorbed = super().query_and_absorb_photon(photon)
        if absorbed:
            self.absorbed_wavelength = photon.wavelength
            self.photon_absorbed()
        return absorbed

    def photon_absorbed(self) -> None:
        raise NotImplementedError(f"{type(self).__name__} must implement photon_absorbed().")

    def resume_hold(self, wavelength: Wavelength) -> None:
        """Hold a photon again after a restore, with a fresh hold time."""
        self.is_photon_absorbed = True
        self.absorbed_wavelength = wavelength
        self.photon_hold_countdown_time = self._draw_hold_time()


class VibrationStrategy(PhotonHoldStrategy):
    def photon_absorbed(self) -> None:
        self.molecule.vibrating = True

    def reemit_photon(self) -> None:
        super().reemit_photon()
        self.molecule.vibrating = False
        self.molecule.set_vibration(0.0)


class RotationStrategy(PhotonHoldStrategy):
    def photon_absorbed(self) -> None:
        self.molecule.rotation_direction_clockwise = self.molecule.rng.random() < 0.5
        self.molecule.rotating = True

    def reemit_photon(self) -> None:
        super().reemit_photon()
        self.molecule.rotating = False


class ExcitationStrategy(PhotonHoldStrategy):
    """Raises the molecule into its high electronic energy (glowing) state."""

    def photon_absorbed(self) -> None:
        self.molecule.high_electronic_energy_state = True

    def reemit_photon(self) -> None:
        super().reemit_photon()
        self.molecule.high_electronic_energy_state = False


class BreakApartStrategy(PhotonAbsorptionStrategy):
    """Dissociates the molecule on the first step after absorption."""

    def step(self, dt: float) -> None:
        self.molecule.break_apart()
        self.reset()


# ---------------------------------------------------------------------------
# Molecule
# ---------------------------------------------------------------------------

MOLECULE_TYPES: Dict[str, Type["Molecule"]] = {}


def register_molecule(cls: Type["Molecule"]) -> Type["Molecule"]:
    """Class decorator making a concrete molecule restorable by formula."""
    MOLECULE_TYPES[cls.formula] = cls
    return cls


class Molecule:
    """
    Base type for molecules: atoms and bonds arranged around a centre of gravity.

    Concrete molecules add their atoms and bonds, assign one absorption
    strategy per wavelength and call `initialize_atom_offsets` from their
    constructor. The strategy table is fixed after construction.
    """

    formula: str = ""

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else SHARED_RANDOM
        self.initial_center_of_gravity: Vector = (float(initial_position[0]), float(initial_position[1]))
        self._center_of_gravity: Vector = self.initial_center_of_gravity
        self.velocity: Vector = vector_zero()

        self.atoms: List[Atom] = []
        self.atomic_bonds: List[AtomicBond] = []
        # Relaxed (non-vibrating, non-rotated) offsets from the centre of gravity.
        self.initial_atom_cog_offsets: Dict[Atom, Vector] = {}
        # Deviation from the relaxed offsets caused by vibration.
        self.vibration_atom_offsets: Dict[Atom, Vector] = {}

        self._absorption_strategies: Dict[Wavelength, PhotonAbsorptionStrategy] = {}
        self._null_strategy = NullPhotonAbsorptionStrategy(self)
        self.active_photon_absorption_strategy: PhotonAbsorptionStrategy = self._null_strategy
        self.absorption_hysteresis_countdown_time = 0.0
        self._pass_through_photons: Deque[Photon] = deque(maxlen=PASS_THROUGH_PHOTON_LIST_SIZE)

        self.current_vibration_radians = 0.0
        self.current_rotation_radians = 0.0
        self.vibrating = False
        self.rotating = False
        self.rotation_direction_clockwise = True
        self.high_electronic_energy_state = False

        self._events: List[MoleculeEvent] = []
        self.disposed = False
        self.broken_apart = False

    def __repr__(self) -> str:
        name = self.formula or type(self).__name__
        return f"<{name} at ({self._center_of_gravity[0]:.1f}, {self._center_of_gravity[1]:.1f})>"

    # -- lifecycle ---------------------------------------------------------

    def reset(self) -> None:
        """Forget any absorbed photon and return to the relaxed, resting state."""
        for strategy in self._absorption_strategies.values():
            strategy.reset()
        self.clear_active_strategy()
        self.absorption_hysteresis_countdown_time = 0.0
        self.high_electronic_energy_state = False
        self.vibrating = False
        self.rotating = False
        self.rotation_direction_clockwise = True
        self.set_rotation(0.0)
        self.set_vibration(0.0)
        self.set_center_of_gravity_pos(*self.initial_center_of_gravity)

    def dispose(self) -> None:
        self.disposed = True
        self._events.clear()
        self._pass_through_photons.clear()

    # -- strategies --------------------------------------------------------

    def set_photon_absorption_strategy(self, wavelength: Wavelength, strategy: PhotonAbsorptionStrategy) -> None:
        if wavelength in self._absorption_strategies:
            raise ValueError(f"{self!r} already has a strategy for {wavelength.light_source}.")
        self._absorption_strategies[wavelength] = strategy

    def get_photon_absorption_strategy_for_wavelength(
        self, wavelength: Wavelength
    ) -> Optional[PhotonAbsorptionStrategy]:
        return self._absorption_strategies.get(wavelength)

    @property
    def absorption_strategies(self) -> Mapping[Wavelength, PhotonAbsorptionStrategy]:
        return MappingProxyType(self._absorption_strategies)

    def clear_active_strategy(self) -> None:
        self.active_photon_absorption_strategy = self._null_strategy

    def is_photon_absorbed(self) -> bool:
        return not isinstance(self.active_photon_absorption_strategy, NullPhotonAbsorptionStrategy)

    # -- structure ---------------------------------------------------------

    def add_atom(self, atom: Atom) -> None:
        self.atoms.append(atom)
        self.initial_atom_cog_offsets[atom] = vector_zero()
        self.vibration_atom_offsets[atom] = vector_zero()

    def add_atomic_bond(self, bond: AtomicBond) -> None:
        self.atomic_bonds.append(bond)

    def add_initial_atom_cog_offset(self, atom: Atom, offset: Vector) -> None:
        self._require_atom(atom)
        self.initial_atom_cog_offsets[atom] = offset

    def get_initial_atom_cog_offset(self, atom: Atom) -> Vector:
        self._require_atom(atom)
        return self.initial_atom_cog_offsets[atom]

    def set_vibration_atom_offset(self, atom: Atom, offset: Vector) -> None:
        self._require_atom(atom)
        self.vibration_atom_offsets[atom] = offset

    def get_vibration_atom_offset(self, atom: Atom) -> Vector:
        self._require_atom(atom)
        return self.vibration_atom_offsets[atom]

    def _require_atom(self, atom: Atom) -> None:
        if atom not in self.initial_atom_cog_offsets:
            raise KeyError(f"Atom {atom.symbol}#{atom.unique_id} is not part of {self!r}.")

    def initialize_atom_offsets(self) -> None:
        raise NotImplementedError(f"{type(self).__name__} must implement initialize_atom_offsets().")

    def vibrates_by_stretching(self) -> bool:
        return len(self.atoms) <= 2

    # -- kinematics --------------------------------------------------------

    @property
    def center_of_gravity(self) -> Vector:
        return self._center_of_gravity

    @center_of_gravity.setter
    def center_of_gravity(self, position: Vector) -> None:
        self.set_center_of_gravity_pos(position[0], position[1])

    def set_center_of_gravity_pos(self, x: float, y: float) -> None:
        if self._center_of_gravity != (x, y):
            self._center_of_gravity = (float(x), float(y))
            self.update_atom_positions()

    def set_vibration(self, vibration_radians: float) -> None:
        """Override point for molecules that vibrate; the base only records the angle."""
        self.current_vibration_radians = vibration_radians

    def _advance_vibration(self, delta_radians: float) -> None:
        self.set_vibration(self.current_vibration_radians + delta_radians)

    def rotate(self, delta_radians: float) -> None:
        self.set_rotation(math.fmod(self.current_rotation_radians + delta_radians, TWO_PI))

    def set_rotation(self, radians: float) -> None:
        if radians != self.current_rotation_radians:
            self.current_rotation_radians = radians
            self.update_atom_positions()

    def update_atom_positions(self) -> None:
        cx, cy = self._center_of_gravity
        for atom in self.atoms:
            offset = vector_add(self.initial_atom_cog_offsets[atom], self.vibration_atom_offsets[atom])
            ox, oy = vector_rotate(offset, self.current_rotation_radians)
            atom.position = (cx + ox, cy + oy)

    def step(self, dt: float) -> List[MoleculeEvent]:
        """Advance one frame and return the events recorded since the last drain."""
        if self.disposed:
            return []
        self.active_photon_absorption_strategy.step(dt)

        # Zero is covered by the emission check, so only count down while positive.
        if self.absorption_hysteresis_countdown_time > 0:
            self.absorption_hysteresis_countdown_time -= dt

        if self.vibrating:
            self._advance_vibration(dt * VIBRATION_FREQUENCY * TWO_PI)

        if self.rotating:
            direction = -1.0 if self.rotation_direction_clockwise else 1.0
            self.rotate(dt * ROTATION_RATE * TWO_PI * direction)

        self.set_center_of_gravity_pos(
            self._center_of_gravity[0] + self.velocity[0] * dt,
            self._center_of_gravity[1] + self.velocity[1] * dt,
        )
        return self.drain_events()

    # -- photons -----------------------------------------------------------

    def mark_photon_for_pass_through(self, photon: Photon) -> None:
        # deque(maxlen) drops the oldest entry once full.
        self._pass_through_photons.append(photon)

    def is_photon_marked_for_pass_through(self, photon: Photon) -> bool:
        return any(known is photon for known in self._pass_through_photons)

    def query_absorb_photon(self, photon: Photon) -> bool:
        """
        Decide whether to absorb the offered photon.

        Only photons strictly inside PHOTON_ABSORPTION_DISTANCE, offered after
        the hysteresis countdown has run out and not already declined, are
        considered. A considered photon is either absorbed (its strategy
        becomes active) or remembered as passed through.
        """
        if self.disposed or self.broken_apart:
            return False
        if self.absorption_hysteresis_countdown_time > 0:
            return False
        if vector_distance(photon.position, self._center_of_gravity) >= PHOTON_ABSORPTION_DISTANCE:
            return False
        if self.is_photon_marked_for_pass_through(photon):
            return False

        candidate = self._absorption_strategies.get(photon.wavelength)
        if candidate is not None and not self.is_photon_absorbed():
            if candidate.query_and_absorb_photon(photon):
                self.active_photon_absorption_strategy = candidate
                logger.debug(f"{self!r} absorbed {photon!r} via {type(candidate).__name__}.")
                self._record(EventKind.PHOTON_ABSORBED, photon=photon)
                return True

        self.mark_photon_for_pass_through(photon)
        self._record(EventKind.PHOTON_PASSED_THROUGH, photon=photon)
        return False

    def emit_photon(self, wavelength: Wavelength) -> Photon:
        """Emit a photon from the centre of gravity in a random direction."""
        emission_angle = self.rng.random() * TWO_PI
        photon = Photon(
            wavelength,
            position=self._center_of_gravity,
            velocity=vector_from_polar(PHOTON_EMISSION_SPEED, emission_angle),
        )
        self.absorption_hysteresis_countdown_time = ABSORPTION_HYSTERESIS_TIME
        logger.debug(f"{self!r} emitted {photon!r}.")
        self._record(EventKind.PHOTON_EMITTED, photon=photon)
        return photon

    # -- dissociation ------------------------------------------------------

    def break_apart(self) -> Tuple["Molecule", "Molecule"]:
        """Dissociate into two new molecules and record a BROKE_APART event."""
        if self.broken_apart:
            raise RuntimeError(f"{self!r} has already broken apart.")
        products = self.create_constituent_molecules()
        self.broken_apart = True
        self.clear_active_strategy()
        self.absorption_hysteresis_countdown_time = ABSORPTION_HYSTERESIS_TIME
        logger.debug(f"{self!r} broke apart into {products[0]!r} and {products[1]!r}.")
        self._record(EventKind.BROKE_APART, products=products)
        return products

    def create_constituent_molecules(self) -> Tuple["Molecule", "Molecule"]:
        raise NotImplementedError(f"break_apart is not implemented for {type(self).__name__}.")

    # -- events ------------------------------------------------------------

    def _record(self, kind: EventKind, **payload: Any) -> None:
        self._events.append(MoleculeEvent(kind, self, **payload))

    def drain_events(self) -> List[MoleculeEvent]:
        events = self._events
        self._events = []
        return events

    # -- serialization -----------------------------------------------------

    def to_state_object(self) -> Dict[str, Any]:
        """Minimal state needed to resume the simulation of this molecule."""
        return {
            "molecule_type": self.formula,
            "high_electronic_energy_state": self.high_electronic_energy_state,
            "center_of_gravity": list(self._center_of_gravity),
            "atoms": [atom.to_state_object() for atom in self.atoms],
            "atomic_bonds": [bond.to_state_object() for bond in self.atomic_bonds],
            "velocity": list(self.velocity),
            "absorption_hysteresis_countdown_time": self.absorption_hysteresis_countdown_time,
            "current_vibration_radians": self.current_vibration_radians,
            "current_rotation_radians": self.current_rotation_radians,
        }

    @staticmethod
    def from_state_object(state: Mapping[str, Any], rng: Optional[random.Random] = None) -> "Molecule":
        """
        Rebuild a molecule from `to_state_object` output.

        Registered molecule types are rebuilt as that type, keeping their
        strategies and vibration behaviour; anything else becomes a bare
        Molecule whose relaxed offsets are taken from the stored positions.
        """
        molecule_cls = MOLECULE_TYPES.get(str(state.get("molecule_type", "")))
        center = _tuple2(state["center_of_gravity"])
        rotation = float(state["current_rotation_radians"])
        atom_states = list(state["atoms"])

        if molecule_cls is None:
            molecule = Molecule(initial_position=center, rng=rng)
            for atom_state in atom_states:
                atom = Atom.from_state_object(atom_state)
                molecule.add_atom(atom)
                relative = vector_sub(atom.position, center)
                molecule.initial_atom_cog_offsets[atom] = vector_rotate(relative, -rotation)
            molecule.current_rotation_radians = rotation
        else:
            molecule = molecule_cls(initial_position=center, rng=rng)
            molecule._adopt_atom_states(atom_states)
            molecule.set_rotation(rotation)

        molecule.atomic_bonds = _bonds_from_state(molecule.atoms, state.get("atomic_bonds", []))
        molecule.bonds_restored()
        if state["high_electronic_energy_state"]:
            molecule._resume_excitation()
        molecule.velocity = _tuple2(state["velocity"])
        molecule.absorption_hysteresis_countdown_time = float(state["absorption_hysteresis_countdown_time"])
        molecule.set_vibration(float(state["current_vibration_radians"]))
        molecule.update_atom_positions()
        return molecule

    def bonds_restored(self) -> None:
        """Hook for types whose behaviour depends on the bond layout."""

    def _resume_excitation(self) -> None:
        # The glow is only ever left by re-emitting, so a restored glow holds a visible photon.
        strategy = self._absorption_strategies.get(Wavelength.VISIBLE)
        if not isinstance(strategy, ExcitationStrategy):
            raise ValueError(f"{self!r} cannot be in the high electronic energy state.")
        strategy.resume_hold(Wavelength.VISIBLE)
        self.active_photon_absorption_strategy = strategy
        self.high_electronic_energy_state = True

    def _adopt_atom_states(self, atom_states: List[Mapping[str, Any]]) -> None:
        symbols = [str(atom_state["symbol"]) for atom_state in atom_states]
        expected = [atom.symbol for atom in self.atoms]
        if symbols != expected:
            raise ValueError(f"{self.formula} expects atoms {expected}, state has {symbols}.")
        for atom, atom_state in zip(self.atoms, atom_states):
            atom.unique_id = int(atom_state["unique_id"])


def _bonds_from_state(atoms: Iterable[Atom], bond_states: Iterable[Mapping[str, Any]]) -> List[AtomicBond]:
    by_id = {atom.unique_id: atom for atom in atoms}
    bonds: List[AtomicBond] = []
    for bond_state in bond_states:
        atom1 = by_id.get(int(bond_state["atom1_id"]))
        atom2 = by_id.get(int(bond_state["atom2_id"]))
        if atom1 is None or atom2 is None:
            raise ValueError(f"Bond {dict(bond_state)} references an atom that is not in the molecule.")
        bonds.append(AtomicBond(atom1, atom2, bond_count=int(bond_state.get("bond_count", 1))))
    return bonds


def count_events(events: Iterable[MoleculeEvent]) -> Dict[EventKind, int]:
    """Tally events by kind; every kind is present in the result."""
    totals = {kind: 0 for kind in EventKind}
    for event in events:
        totals[event.kind] += 1
    return totals
