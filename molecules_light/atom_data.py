"""Element properties used to build the atoms of the molecule catalogue."""

from __future__ import annotations

# Radii in picometres, masses in amu. Colours are the viewer's RGB tuples.
ATOM_PROPERTIES = {
    "C": {"name": "carbon", "radius_pm": 77.0, "mass_amu": 12.011, "color": (128, 128, 128)},
    "H": {"name": "hydrogen", "radius_pm": 37.0, "mass_amu": 1.0, "color": (255, 255, 255)},
    "N": {"name": "nitrogen", "radius_pm": 75.0, "mass_amu": 14.00674, "color": (48, 80, 248)},
    "O": {"name": "oxygen", "radius_pm": 73.0, "mass_amu": 15.9994, "color": (255, 85, 85)},
}


def get_atom_properties(symbol: str) -> dict:
    """Return the property dict for symbol; unknown symbols raise KeyError."""

    try:
        return ATOM_PROPERTIES[symbol]
    except KeyError:
        raise KeyError(f"No atom properties registered for element {symbol!r}.") from None
