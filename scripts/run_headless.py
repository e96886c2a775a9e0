"""
Run the photon-absorption model without a window.

Loads a YAML configuration, advances the model for a number of fixed-size
frames and prints how many of each molecule event occurred. Optionally
writes the final model snapshot (photons plus molecule state objects) as JSON.

The script imports `photon_engine` and `molecules_light` from the repository
root, so install the project first (`pip install -e .`).

Example:
    python scripts/run_headless.py --config config/presets/ozone_ultraviolet.yaml --frames 600
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
from dataclasses import asdict
from typing import Dict, List

from photon_engine import EventKind, MoleculeEvent, Wavelength, count_events
from molecules_light.absorption_model import PhotonTarget
from molecules_light.config_loader import load_model_from_yaml
from molecules_light.logging_setup import setup_logging


logger = logging.getLogger("run_headless")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the photon-absorption model headless.")
    parser.add_argument(
        "--config",
        type=pathlib.Path,
        default=pathlib.Path("config/default.yaml"),
        help="Model configuration YAML.",
    )
    parser.add_argument("--frames", type=int, default=300, help="Number of frames to simulate.")
    parser.add_argument("--dt", type=float, default=1.0 / 60.0, help="Frame length in seconds.")
    parser.add_argument("--seed", type=int, default=None, help="Override the configured random seed.")
    parser.add_argument(
        "--target",
        type=str,
        default=None,
        choices=[target.value for target in PhotonTarget],
        help="Override the configured target molecule.",
    )
    parser.add_argument(
        "--light-source",
        type=str,
        default=None,
        choices=[wavelength.light_source for wavelength in Wavelength],
        help="Override the configured light source.",
    )
    parser.add_argument("--slow", action="store_true", help="Run in slow motion.")
    parser.add_argument(
        "--state-out",
        type=pathlib.Path,
        default=None,
        help="Optional path for the final snapshot as JSON.",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Override the configured log level.")
    return parser.parse_args()


def run(args: argparse.Namespace) -> Dict[EventKind, int]:
    bundle = load_model_from_yaml(args.config, seed=args.seed)
    setup_logging(bundle.logging, level_override=args.log_level)
    model = bundle.model

    if args.target is not None:
        model.set_photon_target(PhotonTarget.from_formula(args.target))
    if args.light_source is not None:
        model.set_photon_wavelength(Wavelength.from_light_source(args.light_source))
    if not model.emitter_on:
        model.set_emitter_on(True)
    model.slow_motion = args.slow

    events: List[MoleculeEvent] = []
    for _ in range(args.frames):
        events.extend(model.step(args.dt))
    totals = count_events(events)
    logger.info(
        f"Ran {args.frames} frames ({model.time_s:.2f} s sim time), "
        f"{len(model.active_molecules)} molecules and {len(model.photons)} photons remain."
    )

    if args.state_out is not None:
        args.state_out.parent.mkdir(parents=True, exist_ok=True)
        with args.state_out.open("w", encoding="utf-8") as handle:
            json.dump(asdict(model.snapshot()), handle, indent=2)
            handle.write("\n")
    return totals


def main() -> None:
    args = parse_args()
    totals = run(args)
    for kind, total in totals.items():
        print(f"{kind.value:>22}: {total}")  # noqa: T201 (informational)


if __name__ == "__main__":
    main()
