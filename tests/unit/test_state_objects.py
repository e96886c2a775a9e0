"""Round-trip and validation tests for molecule state objects."""

from __future__ import annotations

import json

import pytest

from photon_engine import MAX_PHOTON_HOLD_TIME, EventKind, Molecule, Photon, Wavelength
from molecules_light.molecules import CO, NO2, O3


def bond_topology(molecule: Molecule) -> list[tuple[int, int, int]]:
    return sorted((b.atom1.unique_id, b.atom2.unique_id, b.bond_count) for b in molecule.atomic_bonds)


def test_round_trip_preserves_observable_state(scripted_random) -> None:
    molecule = NO2(initial_position=(120.0, -30.0), rng=scripted_random(0.9, 0.1, 0.5, 0.3))
    molecule.velocity = (50.0, 25.0)
    molecule.query_absorb_photon(Photon(Wavelength.MICRO, position=(120.0, -30.0)))
    for _ in range(7):
        molecule.step(0.03)
    molecule.set_vibration(0.4)

    state = molecule.to_state_object()
    restored = Molecule.from_state_object(json.loads(json.dumps(state)))

    assert isinstance(restored, NO2)
    assert restored.center_of_gravity == pytest.approx(molecule.center_of_gravity)
    assert restored.velocity == pytest.approx(molecule.velocity)
    assert restored.current_rotation_radians == pytest.approx(molecule.current_rotation_radians)
    assert restored.current_vibration_radians == pytest.approx(molecule.current_vibration_radians)
    assert restored.high_electronic_energy_state is False
    assert restored.double_bond_on_right is molecule.double_bond_on_right
    assert [a.unique_id for a in restored.atoms] == [a.unique_id for a in molecule.atoms]
    assert [a.symbol for a in restored.atoms] == [a.symbol for a in molecule.atoms]
    assert bond_topology(restored) == bond_topology(molecule)
    for original_atom, restored_atom in zip(molecule.atoms, restored.atoms):
        assert restored_atom.position == pytest.approx(original_atom.position)


def test_state_object_has_expected_keys() -> None:
    state = CO().to_state_object()
    assert set(state) == {
        "molecule_type",
        "high_electronic_energy_state",
        "center_of_gravity",
        "atoms",
        "atomic_bonds",
        "velocity",
        "absorption_hysteresis_countdown_time",
        "current_vibration_radians",
        "current_rotation_radians",
    }
    assert state["molecule_type"] == "CO"
    assert state["atomic_bonds"][0]["bond_count"] == 3


def test_restored_molecule_keeps_its_strategies() -> None:
    restored = Molecule.from_state_object(O3().to_state_object())
    assert isinstance(restored, O3)
    assert restored.get_photon_absorption_strategy_for_wavelength(Wavelength.ULTRAVIOLET) is not None


def test_unknown_type_restores_bare_molecule() -> None:
    state = CO(initial_position=(10.0, 0.0)).to_state_object()
    state["molecule_type"] = "Mystery"
    state["current_rotation_radians"] = 0.5
    expected_positions = [tuple(atom["position"]) for atom in state["atoms"]]

    restored = Molecule.from_state_object(state)

    assert type(restored) is Molecule
    for atom, expected in zip(restored.atoms, expected_positions):
        assert atom.position == pytest.approx(expected)
    assert len(restored.absorption_strategies) == 0
    with pytest.raises(NotImplementedError):
        restored.break_apart()


def test_restored_hysteresis_still_blocks_queries(scripted_random) -> None:
    molecule = CO(rng=scripted_random(0.0))
    molecule.emit_photon(Wavelength.INFRARED)
    restored = Molecule.from_state_object(molecule.to_state_object(), rng=scripted_random(default=0.1))
    assert restored.query_absorb_photon(Photon(Wavelength.INFRARED)) is False


def test_bond_to_missing_atom_is_rejected() -> None:
    state = CO().to_state_object()
    state["atomic_bonds"][0]["atom2_id"] = -1
    with pytest.raises(ValueError):
        Molecule.from_state_object(state)


def test_atom_list_must_match_registered_type() -> None:
    state = CO().to_state_object()
    state["atoms"] = state["atoms"][:1]
    with pytest.raises(ValueError):
        Molecule.from_state_object(state)


def test_restored_glow_is_released_by_reemission(scripted_random) -> None:
    # absorb, hold draw
    molecule = NO2(rng=scripted_random(0.9, 0.1, 0.5))
    assert molecule.query_absorb_photon(Photon(Wavelength.VISIBLE)) is True
    state = json.loads(json.dumps(molecule.to_state_object()))

    # double-bond side, then a 1.1 s hold; later draws absorb and emit at angle 0
    restored = Molecule.from_state_object(state, rng=scripted_random(0.9, 0.0, default=0.0))
    assert restored.high_electronic_energy_state is True
    assert restored.is_photon_absorbed()

    events = []
    steps = int(MAX_PHOTON_HOLD_TIME / 0.1) + 2
    for _ in range(steps):
        events.extend(restored.step(0.1))
    emitted = [event for event in events if event.kind is EventKind.PHOTON_EMITTED]
    assert len(emitted) == 1
    assert emitted[0].photon.wavelength is Wavelength.VISIBLE
    assert restored.high_electronic_energy_state is False
    assert not restored.is_photon_absorbed()

    restored.step(0.3)
    assert restored.query_absorb_photon(Photon(Wavelength.INFRARED, position=restored.center_of_gravity)) is True
    assert restored.vibrating is True
    assert restored.high_electronic_energy_state is False


def test_glow_on_molecule_without_excitation_is_rejected() -> None:
    state = CO().to_state_object()
    state["high_electronic_energy_state"] = True
    with pytest.raises(ValueError):
        Molecule.from_state_object(state)
