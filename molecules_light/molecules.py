"""
Concrete molecules: geometry, bonds, absorption strategies and vibration modes.

All offsets are picometres from the centre of gravity. Vibration is expressed
as a displacement from the relaxed offsets, scaled by sin(vibration angle), so
`set_vibration(0)` always restores the relaxed shape.
"""

from __future__ import annotations

import math
import random
from typing import Optional, Tuple

from photon_engine import (
    MOLECULE_TYPES,
    Atom,
    AtomicBond,
    BreakApartStrategy,
    ExcitationStrategy,
    Molecule,
    RotationStrategy,
    Vector,
    VibrationStrategy,
    Wavelength,
    register_molecule,
    vector_add,
    vector_from_polar,
    vector_rotate,
    vector_scale,
)


DIATOMIC_BOND_LENGTH = 170.0
BREAK_APART_VELOCITY = 3000.0  # pm/s shared by the two products before the mass split


def _add_bond(molecule: Molecule, atom1: Atom, atom2: Atom, bond_count: int = 1, **kwargs) -> None:
    molecule.add_atomic_bond(AtomicBond(atom1, atom2, bond_count=bond_count, **kwargs))


class _Diatomic(Molecule):
    """Two atoms on the x axis, DIATOMIC_BOND_LENGTH apart."""

    first_symbol = ""
    second_symbol = ""
    bond_count = 1

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        super().__init__(initial_position, rng)
        self.atom1 = Atom.of(self.first_symbol)
        self.atom2 = Atom.of(self.second_symbol)
        self.add_atom(self.atom1)
        self.add_atom(self.atom2)
        _add_bond(self, self.atom1, self.atom2, self.bond_count)
        self.assign_strategies()
        self.initialize_atom_offsets()

    def assign_strategies(self) -> None:
        pass

    def initialize_atom_offsets(self) -> None:
        self.add_initial_atom_cog_offset(self.atom1, (-DIATOMIC_BOND_LENGTH / 2, 0.0))
        self.add_initial_atom_cog_offset(self.atom2, (DIATOMIC_BOND_LENGTH / 2, 0.0))
        self.update_atom_positions()


@register_molecule
class CO(_Diatomic):
    formula = "CO"
    first_symbol = "C"
    second_symbol = "O"
    bond_count = 3
    vibration_magnitude = 20.0

    @property
    def carbon_atom(self) -> Atom:
        return self.atom1

    @property
    def oxygen_atom(self) -> Atom:
        return self.atom2

    def assign_strategies(self) -> None:
        self.set_photon_absorption_strategy(Wavelength.MICRO, RotationStrategy(self))
        self.set_photon_absorption_strategy(Wavelength.INFRARED, VibrationStrategy(self))

    def set_vibration(self, vibration_radians: float) -> None:
        super().set_vibration(vibration_radians)
        mult = math.sin(vibration_radians)
        self.set_vibration_atom_offset(self.atom1, (self.vibration_magnitude * mult, 0.0))
        self.set_vibration_atom_offset(self.atom2, (-self.vibration_magnitude * mult, 0.0))
        self.update_atom_positions()


@register_molecule
class N2(_Diatomic):
    formula = "N2"
    first_symbol = "N"
    second_symbol = "N"
    bond_count = 3


@register_molecule
class O2(_Diatomic):
    formula = "O2"
    first_symbol = "O"
    second_symbol = "O"
    bond_count = 2


@register_molecule
class NO(_Diatomic):
    formula = "NO"
    first_symbol = "N"
    second_symbol = "O"
    bond_count = 2


@register_molecule
class O(Molecule):
    """A lone oxygen atom, produced when NO2 or O3 break apart."""

    formula = "O"

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        super().__init__(initial_position, rng)
        self.oxygen_atom = Atom.oxygen()
        self.add_atom(self.oxygen_atom)
        self.initialize_atom_offsets()

    def initialize_atom_offsets(self) -> None:
        self.add_initial_atom_cog_offset(self.oxygen_atom, (0.0, 0.0))
        self.update_atom_positions()


CO2_CARBON_OXYGEN_DISTANCE = 170.0
CO2_CARBON_MAX_DEFLECTION = 40.0


@register_molecule
class CO2(Molecule):
    """Linear O=C=O; infrared makes it bend."""

    formula = "CO2"

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        super().__init__(initial_position, rng)
        self.carbon_atom = Atom.carbon()
        self.oxygen_atom1 = Atom.oxygen()
        self.oxygen_atom2 = Atom.oxygen()
        self.add_atom(self.carbon_atom)
        self.add_atom(self.oxygen_atom1)
        self.add_atom(self.oxygen_atom2)
        _add_bond(self, self.carbon_atom, self.oxygen_atom1, 2)
        _add_bond(self, self.carbon_atom, self.oxygen_atom2, 2)
        # The oxygens move against the carbon so the centre of gravity stays put.
        self.oxygen_max_deflection = (
            self.carbon_atom.mass_amu * CO2_CARBON_MAX_DEFLECTION / (2 * self.oxygen_atom1.mass_amu)
        )
        self.set_photon_absorption_strategy(Wavelength.INFRARED, VibrationStrategy(self))
        self.initialize_atom_offsets()

    def initialize_atom_offsets(self) -> None:
        self.add_initial_atom_cog_offset(self.carbon_atom, (0.0, 0.0))
        self.add_initial_atom_cog_offset(self.oxygen_atom1, (CO2_CARBON_OXYGEN_DISTANCE, 0.0))
        self.add_initial_atom_cog_offset(self.oxygen_atom2, (-CO2_CARBON_OXYGEN_DISTANCE, 0.0))
        self.update_atom_positions()

    def set_vibration(self, vibration_radians: float) -> None:
        super().set_vibration(vibration_radians)
        mult = math.sin(vibration_radians)
        self.set_vibration_atom_offset(self.carbon_atom, (0.0, mult * CO2_CARBON_MAX_DEFLECTION))
        self.set_vibration_atom_offset(self.oxygen_atom1, (0.0, -mult * self.oxygen_max_deflection))
        self.set_vibration_atom_offset(self.oxygen_atom2, (0.0, -mult * self.oxygen_max_deflection))
        self.update_atom_positions()


H2O_BOND_LENGTH = 130.0
H2O_BOND_ANGLE = math.radians(109)


@register_molecule
class H2O(Molecule):
    formula = "H2O"
    max_oxygen_displacement = 3.0
    max_hydrogen_displacement = 18.0

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        super().__init__(initial_position, rng)
        self.oxygen_atom = Atom.oxygen()
        self.hydrogen_atom1 = Atom.hydrogen()
        self.hydrogen_atom2 = Atom.hydrogen()

        height = H2O_BOND_LENGTH * math.cos(H2O_BOND_ANGLE / 2)
        total_mass = self.oxygen_atom.mass_amu + 2 * self.hydrogen_atom1.mass_amu
        self.oxygen_vertical_offset = height * (2 * self.hydrogen_atom1.mass_amu / total_mass)
        self.hydrogen_vertical_offset = -(height - self.oxygen_vertical_offset)
        self.hydrogen_horizontal_offset = H2O_BOND_LENGTH * math.sin(H2O_BOND_ANGLE / 2)

        self.add_atom(self.oxygen_atom)
        self.add_atom(self.hydrogen_atom1)
        self.add_atom(self.hydrogen_atom2)
        _add_bond(self, self.oxygen_atom, self.hydrogen_atom1)
        _add_bond(self, self.oxygen_atom, self.hydrogen_atom2)
        self.set_photon_absorption_strategy(Wavelength.MICRO, RotationStrategy(self))
        self.set_photon_absorption_strategy(Wavelength.INFRARED, VibrationStrategy(self))
        self.initialize_atom_offsets()

    def initialize_atom_offsets(self) -> None:
        self.add_initial_atom_cog_offset(self.oxygen_atom, (0.0, self.oxygen_vertical_offset))
        self.add_initial_atom_cog_offset(
            self.hydrogen_atom1, (self.hydrogen_horizontal_offset, self.hydrogen_vertical_offset)
        )
        self.add_initial_atom_cog_offset(
            self.hydrogen_atom2, (-self.hydrogen_horizontal_offset, self.hydrogen_vertical_offset)
        )
        self.update_atom_positions()

    def set_vibration(self, vibration_radians: float) -> None:
        super().set_vibration(vibration_radians)
        mult = math.sin(vibration_radians)
        o_disp = mult * self.max_oxygen_displacement
        h_disp = mult * self.max_hydrogen_displacement
        self.set_vibration_atom_offset(self.oxygen_atom, (0.0, -o_disp))
        self.set_vibration_atom_offset(self.hydrogen_atom1, (h_disp, h_disp))
        self.set_vibration_atom_offset(self.hydrogen_atom2, (-h_disp, h_disp))
        self.update_atom_positions()


BENT_TRIATOMIC_BOND_LENGTH = 180.0
BENT_TRIATOMIC_BOND_ANGLE = math.radians(120)
# Rotation that lines a diatomic product up with the bond it came from.
DIATOMIC_PRODUCT_ROTATION = math.pi / 2 - BENT_TRIATOMIC_BOND_ANGLE / 2


class _BentTriatomic(Molecule):
    """
    Shared behaviour of NO2 and O3: one single and one double bond, placed on
    a random side, and dissociation into a diatomic and a lone oxygen atom
    along the double bond.
    """

    max_center_displacement = 30.0
    max_outer_displacement = 15.0

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        super().__init__(initial_position, rng)
        self.double_bond_on_right = self.rng.random() < 0.5

    def _bond_outer_atoms(self) -> None:
        right_count, left_count = (2, 1) if self.double_bond_on_right else (1, 2)
        _add_bond(self, self.center_atom, self.right_atom, right_count)
        _add_bond(self, self.center_atom, self.left_atom, left_count)

    @property
    def center_atom(self) -> Atom:
        raise NotImplementedError

    @property
    def right_atom(self) -> Atom:
        raise NotImplementedError

    @property
    def left_atom(self) -> Atom:
        raise NotImplementedError

    def create_diatomic_product(self) -> Molecule:
        raise NotImplementedError

    def bonds_restored(self) -> None:
        for bond in self.atomic_bonds:
            if bond.bond_count == 2 and self.right_atom in (bond.atom1, bond.atom2):
                self.double_bond_on_right = True
                return
        self.double_bond_on_right = False

    def create_constituent_molecules(self) -> Tuple[Molecule, Molecule]:
        diatomic = self.create_diatomic_product()
        single_oxygen = O(rng=self.rng)

        if self.double_bond_on_right:
            bonded_atom, lone_atom = self.right_atom, self.left_atom
            diatomic.rotate(-DIATOMIC_PRODUCT_ROTATION)
            break_apart_angle = math.pi / 4 + self.rng.random() * math.pi / 4
        else:
            bonded_atom, lone_atom = self.left_atom, self.right_atom
            diatomic.rotate(math.pi + DIATOMIC_PRODUCT_ROTATION)
            break_apart_angle = math.pi / 2 + self.rng.random() * math.pi / 4

        center_offset = self.get_initial_atom_cog_offset(self.center_atom)
        bonded_offset = self.get_initial_atom_cog_offset(bonded_atom)
        midpoint = vector_scale(vector_add(center_offset, bonded_offset), 0.5)
        self._place_product(diatomic, midpoint)
        self._place_product(single_oxygen, self.get_initial_atom_cog_offset(lone_atom))

        diatomic.velocity = vector_from_polar(BREAK_APART_VELOCITY * 0.33, break_apart_angle)
        single_oxygen.velocity = vector_from_polar(-BREAK_APART_VELOCITY * 0.67, break_apart_angle)
        return diatomic, single_oxygen

    def _place_product(self, product: Molecule, offset: Vector) -> None:
        # Products start where the parent's atoms are drawn, rotation included. Their
        # velocities are not rotated: they always fly apart towards the top and bottom.
        position = vector_add(self.center_of_gravity, vector_rotate(offset, self.current_rotation_radians))
        if self.current_rotation_radians:
            product.rotate(self.current_rotation_radians)
        product.initial_center_of_gravity = position
        product.set_center_of_gravity_pos(*position)


@register_molecule
class NO2(_BentTriatomic):
    """
    Nitrogen dioxide. Absorbs in every band: rotates under microwaves,
    bends under infrared, glows under visible light and dissociates into
    NO + O under ultraviolet.
    """

    formula = "NO2"

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        super().__init__(initial_position, rng)
        self.nitrogen_atom = Atom.nitrogen()
        self.right_oxygen_atom = Atom.oxygen()
        self.left_oxygen_atom = Atom.oxygen()

        height = BENT_TRIATOMIC_BOND_LENGTH * math.cos(BENT_TRIATOMIC_BOND_ANGLE / 2)
        total_mass = self.nitrogen_atom.mass_amu + 2 * self.right_oxygen_atom.mass_amu
        self.nitrogen_vertical_offset = height * (2 * self.right_oxygen_atom.mass_amu / total_mass)
        self.oxygen_vertical_offset = -(height - self.nitrogen_vertical_offset)
        self.oxygen_horizontal_offset = BENT_TRIATOMIC_BOND_LENGTH * math.sin(BENT_TRIATOMIC_BOND_ANGLE / 2)

        self.add_atom(self.nitrogen_atom)
        self.add_atom(self.right_oxygen_atom)
        self.add_atom(self.left_oxygen_atom)
        self._bond_outer_atoms()
        self.set_photon_absorption_strategy(Wavelength.MICRO, RotationStrategy(self))
        self.set_photon_absorption_strategy(Wavelength.INFRARED, VibrationStrategy(self))
        self.set_photon_absorption_strategy(Wavelength.VISIBLE, ExcitationStrategy(self))
        self.set_photon_absorption_strategy(Wavelength.ULTRAVIOLET, BreakApartStrategy(self))
        self.initialize_atom_offsets()

    @property
    def center_atom(self) -> Atom:
        return self.nitrogen_atom

    @property
    def right_atom(self) -> Atom:
        return self.right_oxygen_atom

    @property
    def left_atom(self) -> Atom:
        return self.left_oxygen_atom

    def initialize_atom_offsets(self) -> None:
        self.add_initial_atom_cog_offset(self.nitrogen_atom, (0.0, self.nitrogen_vertical_offset))
        self.add_initial_atom_cog_offset(
            self.right_oxygen_atom, (self.oxygen_horizontal_offset, self.oxygen_vertical_offset)
        )
        self.add_initial_atom_cog_offset(
            self.left_oxygen_atom, (-self.oxygen_horizontal_offset, self.oxygen_vertical_offset)
        )
        self.update_atom_positions()

    def set_vibration(self, vibration_radians: float) -> None:
        super().set_vibration(vibration_radians)
        mult = math.sin(vibration_radians)
        center = mult * self.max_center_displacement
        outer = mult * self.max_outer_displacement
        self.set_vibration_atom_offset(self.nitrogen_atom, (0.0, -center))
        self.set_vibration_atom_offset(self.right_oxygen_atom, (outer, outer))
        self.set_vibration_atom_offset(self.left_oxygen_atom, (-outer, outer))
        self.update_atom_positions()

    def create_diatomic_product(self) -> Molecule:
        return NO(rng=self.rng)


@register_molecule
class O3(_BentTriatomic):
    """Ozone; ultraviolet splits it into O2 + O."""

    formula = "O3"

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        super().__init__(initial_position, rng)
        self.center_oxygen_atom = Atom.oxygen()
        self.left_oxygen_atom = Atom.oxygen()
        self.right_oxygen_atom = Atom.oxygen()

        height = BENT_TRIATOMIC_BOND_LENGTH * math.cos(BENT_TRIATOMIC_BOND_ANGLE / 2)
        width = 2 * BENT_TRIATOMIC_BOND_LENGTH * math.sin(BENT_TRIATOMIC_BOND_ANGLE / 2)
        # All three atoms weigh the same, so the centre of gravity sits a third of the way up.
        self.center_vertical_offset = 2.0 / 3.0 * height
        self.outer_vertical_offset = -self.center_vertical_offset / 2
        self.outer_horizontal_offset = width / 2

        self.add_atom(self.center_oxygen_atom)
        self.add_atom(self.left_oxygen_atom)
        self.add_atom(self.right_oxygen_atom)
        self._bond_outer_atoms()
        self.set_photon_absorption_strategy(Wavelength.MICRO, RotationStrategy(self))
        self.set_photon_absorption_strategy(Wavelength.INFRARED, VibrationStrategy(self))
        self.set_photon_absorption_strategy(Wavelength.ULTRAVIOLET, BreakApartStrategy(self))
        self.initialize_atom_offsets()

    @property
    def center_atom(self) -> Atom:
        return self.center_oxygen_atom

    @property
    def right_atom(self) -> Atom:
        return self.right_oxygen_atom

    @property
    def left_atom(self) -> Atom:
        return self.left_oxygen_atom

    def initialize_atom_offsets(self) -> None:
        self.add_initial_atom_cog_offset(self.center_oxygen_atom, (0.0, self.center_vertical_offset))
        self.add_initial_atom_cog_offset(
            self.left_oxygen_atom, (-self.outer_horizontal_offset, self.outer_vertical_offset)
        )
        self.add_initial_atom_cog_offset(
            self.right_oxygen_atom, (self.outer_horizontal_offset, self.outer_vertical_offset)
        )
        self.update_atom_positions()

    def set_vibration(self, vibration_radians: float) -> None:
        super().set_vibration(vibration_radians)
        mult = math.sin(vibration_radians)
        center = mult * self.max_center_displacement
        outer = mult * self.max_outer_displacement
        self.set_vibration_atom_offset(self.center_oxygen_atom, (0.0, center))
        self.set_vibration_atom_offset(self.right_oxygen_atom, (-outer, -outer))
        self.set_vibration_atom_offset(self.left_oxygen_atom, (outer, -outer))
        self.update_atom_positions()

    def create_diatomic_product(self) -> Molecule:
        return O2(rng=self.rng)


CH4_CARBON_HYDROGEN_DISTANCE = 155.0
CH4_BOND_ANGLE = math.pi * 0.9
CH4_ROTATED_HORIZONTAL = CH4_CARBON_HYDROGEN_DISTANCE * math.cos(CH4_BOND_ANGLE)
CH4_ROTATED_VERTICAL = CH4_CARBON_HYDROGEN_DISTANCE * math.sin(CH4_BOND_ANGLE)
CH4_PERSPECTIVE_OFFSET = 30.0
CH4_HYDROGEN_VIBRATION_DISTANCE = 30.0
CH4_HYDROGEN_VIBRATION_ANGLE = math.pi / 4
CH4_HYDROGEN_VIBRATION_X = CH4_HYDROGEN_VIBRATION_DISTANCE * math.cos(CH4_HYDROGEN_VIBRATION_ANGLE)
CH4_HYDROGEN_VIBRATION_Y = CH4_HYDROGEN_VIBRATION_DISTANCE * math.sin(CH4_HYDROGEN_VIBRATION_ANGLE)


@register_molecule
class CH4(Molecule):
    """
    Methane drawn as a flattened tetrahedron.

    Two hydrogens sit on the top layer and the perspective offset fakes depth.
    Under infrared the hydrogens wag and the carbon moves the opposite way,
    weighted by mass, to keep the centre of gravity fixed.
    """

    formula = "CH4"

    def __init__(self, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None):
        super().__init__(initial_position, rng)
        self.carbon_atom = Atom.carbon()
        self.hydrogen_atom1 = Atom.hydrogen(top_layer=True)
        self.hydrogen_atom2 = Atom.hydrogen()
        self.hydrogen_atom3 = Atom.hydrogen()
        self.hydrogen_atom4 = Atom.hydrogen(top_layer=True)
        self.add_atom(self.carbon_atom)
        for hydrogen in self.hydrogen_atoms:
            self.add_atom(hydrogen)
            _add_bond(self, self.carbon_atom, hydrogen, top_layer=hydrogen.top_layer)
        self.set_photon_absorption_strategy(Wavelength.INFRARED, VibrationStrategy(self))
        self.initialize_atom_offsets()

    @property
    def hydrogen_atoms(self) -> Tuple[Atom, Atom, Atom, Atom]:
        return (self.hydrogen_atom1, self.hydrogen_atom2, self.hydrogen_atom3, self.hydrogen_atom4)

    def initialize_atom_offsets(self) -> None:
        self.add_initial_atom_cog_offset(self.carbon_atom, (0.0, 0.0))
        self.add_initial_atom_cog_offset(self.hydrogen_atom1, (0.0, CH4_CARBON_HYDROGEN_DISTANCE))
        self.add_initial_atom_cog_offset(self.hydrogen_atom2, (CH4_ROTATED_HORIZONTAL, -CH4_ROTATED_VERTICAL))
        self.add_initial_atom_cog_offset(
            self.hydrogen_atom3, (-CH4_ROTATED_HORIZONTAL, -CH4_ROTATED_VERTICAL + CH4_PERSPECTIVE_OFFSET)
        )
        self.add_initial_atom_cog_offset(
            self.hydrogen_atom4, (CH4_PERSPECTIVE_OFFSET, -CH4_CARBON_HYDROGEN_DISTANCE + CH4_PERSPECTIVE_OFFSET)
        )
        self.update_atom_positions()

    def set_vibration(self, vibration_radians: float) -> None:
        super().set_vibration(vibration_radians)
        mult = 1.5 * math.sin(vibration_radians)
        dx = mult * CH4_HYDROGEN_VIBRATION_X
        dy = mult * CH4_HYDROGEN_VIBRATION_Y
        abs_dy = abs(mult) * CH4_HYDROGEN_VIBRATION_Y
        deltas = {
            self.hydrogen_atom1: (dx, -abs_dy),
            self.hydrogen_atom2: (dx, -dy),
            self.hydrogen_atom3: (-dx, -dy),
            self.hydrogen_atom4: (dx, abs_dy),
        }
        sum_x = sum(delta[0] for delta in deltas.values())
        sum_y = sum(delta[1] for delta in deltas.values())
        mass_ratio = self.hydrogen_atom1.mass_amu / self.carbon_atom.mass_amu
        deltas[self.carbon_atom] = (-mass_ratio * sum_x, -mass_ratio * sum_y)
        for atom, delta in deltas.items():
            self.set_vibration_atom_offset(atom, delta)
        self.update_atom_positions()


def create_molecule(formula: str, initial_position: Vector = (0.0, 0.0), rng: Optional[random.Random] = None) -> Molecule:
    """Instantiate a registered molecule type by its formula."""
    try:
        molecule_cls = MOLECULE_TYPES[formula]
    except KeyError:
        raise ValueError(f"Unknown molecule formula {formula!r}.") from None
    return molecule_cls(initial_position=initial_position, rng=rng)
