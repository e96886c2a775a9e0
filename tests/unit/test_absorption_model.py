"""Tests for the frame driver: emitter timing, photon bookkeeping and break-apart handling."""

from __future__ import annotations

import pytest

from photon_engine import EventKind, Photon, Wavelength
from molecules_light.absorption_model import ModelSettings, PhotonAbsorptionModel, PhotonTarget
from molecules_light.molecules import CO, O, O2, O3

WIDE_BOUNDS = (-5000.0, -5000.0, 5000.0, 5000.0)


def make_model(target: PhotonTarget = PhotonTarget.SINGLE_N2_MOLECULE, rng=None, **overrides) -> PhotonAbsorptionModel:
    settings = ModelSettings(initial_target=target, region_bounds_pm=WIDE_BOUNDS, **overrides)
    return PhotonAbsorptionModel(settings, rng=rng)


def test_first_photon_leaves_as_soon_as_emitter_is_switched_on() -> None:
    model = make_model()
    model.set_emitter_on(True)
    model.step(0.1)

    assert len(model.photons) == 1
    photon = model.photons[0]
    # Emitted with the 0.1 s overshoot as an advance along its path.
    assert photon.position == pytest.approx((-1350.0 + 3000.0 * 0.1, 0.0))
    assert photon.velocity == pytest.approx((3000.0, 0.0))
    assert photon.wavelength is Wavelength.INFRARED


def test_emitter_fires_every_emission_period() -> None:
    model = make_model(emitter_on=True)
    model.step(0.1)
    for _ in range(7):
        model.step(0.1)
    assert len(model.photons) == 1
    model.step(0.1)
    model.step(0.1)
    assert len(model.photons) == 2


def test_emitter_off_emits_nothing() -> None:
    model = make_model()
    for _ in range(20):
        model.step(0.1)
    assert model.photons == []


def test_oversized_steps_are_ignored() -> None:
    model = make_model(emitter_on=True)
    assert model.step(0.25) == []
    assert model.photons == []
    assert model.time_s == 0.0


def test_slow_motion_halves_the_step() -> None:
    model = make_model()
    model.slow_motion = True
    model.step(0.1)
    assert model.time_s == pytest.approx(0.05)


def test_paused_model_only_advances_on_manual_step() -> None:
    model = make_model(emitter_on=True)
    model.running = False
    model.step(0.1)
    assert model.photons == []

    model.manual_step(0.1)
    assert len(model.photons) == 1


def test_changing_wavelength_clears_photons_and_rearms_emitter() -> None:
    model = make_model(emitter_on=True)
    model.step(0.1)
    assert len(model.photons) == 1

    model.set_photon_wavelength(Wavelength.VISIBLE)
    assert model.photons == []
    assert model.photon_emission_countdown_timer == 0.0

    model.step(0.1)
    assert [photon.wavelength for photon in model.photons] == [Wavelength.VISIBLE]
    assert model.light_source == "visible"


def test_setting_same_wavelength_keeps_photons() -> None:
    model = make_model(emitter_on=True)
    model.step(0.1)
    model.set_photon_wavelength(Wavelength.INFRARED)
    assert len(model.photons) == 1


def test_photons_leaving_the_region_are_removed() -> None:
    model = PhotonAbsorptionModel(ModelSettings(initial_target=PhotonTarget.SINGLE_N2_MOLECULE))
    model.photons.append(Photon(Wavelength.INFRARED, position=(1490.0, 0.0), velocity=(3000.0, 0.0)))
    model.step(0.01)
    assert model.photons == []


def test_absorbed_photon_is_removed_and_reemitted(scripted_random) -> None:
    # absorb, hold 1.1 s, emit at angle 0
    model = make_model(PhotonTarget.SINGLE_CO_MOLECULE, rng=scripted_random(0.1, 0.0, 0.0))
    photon = Photon(Wavelength.INFRARED, position=(0.0, 0.0), velocity=(3000.0, 0.0))
    model.photons.append(photon)

    events = model.step(0.1)
    assert [event.kind for event in events] == [EventKind.PHOTON_ABSORBED]
    assert model.photons == []
    assert isinstance(model.target_molecule, CO)
    assert model.target_molecule.vibrating

    emitted = []
    for _ in range(15):
        emitted.extend(event.photon for event in model.step(0.1) if event.kind is EventKind.PHOTON_EMITTED)
    assert len(emitted) == 1
    assert any(p is emitted[0] for p in model.photons)
    assert not model.target_molecule.vibrating


def test_break_apart_replaces_molecule_with_products(scripted_random) -> None:
    # O3 double-bond side, absorb, hold draw, break-apart angle
    model = make_model(PhotonTarget.SINGLE_O3_MOLECULE, rng=scripted_random(0.9, 0.1, 0.5, 0.3))
    ozone = model.target_molecule
    assert isinstance(ozone, O3)
    model.set_photon_wavelength(Wavelength.ULTRAVIOLET)
    model.photons.append(Photon(Wavelength.ULTRAVIOLET, position=(0.0, 0.0), velocity=(3000.0, 0.0)))

    events = model.step(0.01)

    assert [event.kind for event in events] == [EventKind.PHOTON_ABSORBED, EventKind.BROKE_APART]
    diatomic, atom = events[1].products
    assert isinstance(diatomic, O2)
    assert isinstance(atom, O)
    assert model.target_molecule is None
    assert ozone.disposed
    assert all(molecule is not ozone for molecule in model.active_molecules)
    assert model.has_both_constituent_molecules(diatomic, atom)
    assert model.photons == []

    model.step(0.01)
    assert len(model.active_molecules) == 2


def test_restore_active_molecule_after_break_apart(scripted_random) -> None:
    model = make_model(PhotonTarget.SINGLE_O3_MOLECULE, rng=scripted_random(0.9, 0.1, 0.5, 0.3, default=0.6))
    model.photons.append(Photon(Wavelength.ULTRAVIOLET, position=(0.0, 0.0)))
    model.step(0.01)
    products = list(model.active_molecules)

    model.restore_active_molecule()

    assert len(model.active_molecules) == 1
    assert isinstance(model.target_molecule, O3)
    assert all(product.disposed for product in products)
    assert not model.has_both_constituent_molecules(*products)


def test_set_photon_target_swaps_molecule() -> None:
    model = make_model()
    old = model.target_molecule
    model.set_photon_target(PhotonTarget.SINGLE_CH4_MOLECULE)
    assert old is not None and old.disposed
    assert model.target_molecule is not None
    assert model.target_molecule.formula == "CH4"
    assert model.active_molecules == [model.target_molecule]


def test_reset_restores_initial_configuration() -> None:
    model = make_model(PhotonTarget.SINGLE_CO_MOLECULE)
    model.set_emitter_on(True)
    model.set_photon_wavelength(Wavelength.MICRO)
    model.set_photon_target(PhotonTarget.SINGLE_H2O_MOLECULE)
    model.slow_motion = True
    model.running = False
    model.manual_step(0.1)

    model.reset()

    assert model.photons == []
    assert model.photon_target is PhotonTarget.SINGLE_CO_MOLECULE
    assert isinstance(model.target_molecule, CO)
    assert model.photon_wavelength is Wavelength.INFRARED
    assert model.emitter_on is False
    assert model.running is True
    assert model.slow_motion is False
    assert model.time_s == 0.0
    model.step(0.1)
    assert model.photons == []


def test_photon_target_from_formula() -> None:
    assert PhotonTarget.from_formula("no2") is PhotonTarget.SINGLE_NO2_MOLECULE
    assert PhotonTarget.SINGLE_H2O_MOLECULE.molecule_type.formula == "H2O"
    with pytest.raises(ValueError):
        PhotonTarget.from_formula("He")


def test_snapshot_lists_photons_and_molecules() -> None:
    model = make_model(emitter_on=True)
    model.step(0.1)
    snapshot = model.snapshot()
    assert snapshot.light_source == "infrared"
    assert snapshot.photon_target == "N2"
    assert len(snapshot.photons) == 1
    assert snapshot.photons[0].wavelength == "infrared"
    assert [state["molecule_type"] for state in snapshot.molecules] == ["N2"]


def test_seeded_models_replay_identically() -> None:
    def run() -> list:
        model = make_model(PhotonTarget.SINGLE_NO2_MOLECULE, seed=42, emitter_on=True)
        model.set_photon_wavelength(Wavelength.VISIBLE)
        kinds = []
        for _ in range(400):
            kinds.extend(event.kind for event in model.step(1.0 / 60.0))
        return kinds

    assert run() == run()
