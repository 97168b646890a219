"""Unit conversion helpers for the FHIR to openEHR mapping functions."""

from .rate_units import ALLOWED_RATE_UNITS, build_rate_unit, normalize_rate_unit
from .time_units import (
    DURATION_CONVERTER,
    FREQUENCY_CONVERTER,
    DurationUnitConverter,
    FrequencyUnitConverter,
    TimeUnitConverter,
    format_duration,
    frequency_unit,
)

__all__ = [
    "ALLOWED_RATE_UNITS",
    "DURATION_CONVERTER",
    "FREQUENCY_CONVERTER",
    "DurationUnitConverter",
    "FrequencyUnitConverter",
    "TimeUnitConverter",
    "build_rate_unit",
    "format_duration",
    "frequency_unit",
    "normalize_rate_unit",
]
