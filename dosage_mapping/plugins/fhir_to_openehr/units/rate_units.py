"""Normalisation of administration rate units (amount per time)."""

import re

UNIT_ABBREVIATIONS: dict[str, str] = {
    "liter": "l",
    "milliliter": "ml",
    "hour": "h",
    "minute": "min",
    "second": "s",
}

COMPOUND_UNITS: dict[str, str] = {
    "ml/hour": "ml/h",
    "l/hour": "l/h",
    "ml/minute": "ml/min",
    "ml/second": "ml/s",
}

# Units accepted by the openEHR administration rate element
ALLOWED_RATE_UNITS = frozenset({"l/h", "ml/min", "ml/s", "ml/h"})

_SLASH = re.compile(r"\s*/\s*")


def normalize_rate_unit(unit: str) -> str:
    """
    Normalise a rate unit such as ``"Milliliter / Hour"`` to ``"ml/h"``.

    Lower-cases the unit, removes whitespace around ``/``, abbreviates long
    unit names per component and finally canonicalises known compounds.
    Unknown components are kept as they are (``"gram/day"`` stays as is).
    """
    text = _SLASH.sub("/", unit.strip().lower())
    parts = [UNIT_ABBREVIATIONS.get(part, part) for part in text.split("/")]
    normalized = "/".join(parts)
    return COMPOUND_UNITS.get(normalized, normalized)


def build_rate_unit(numerator_unit: str, denominator_unit: str) -> str:
    """Normalised ``numerator/denominator`` unit."""
    return normalize_rate_unit(f"{numerator_unit}/{denominator_unit}")


def is_allowed_rate_unit(unit: str) -> bool:
    return unit in ALLOWED_RATE_UNITS
