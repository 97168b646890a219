"""
Time unit conversion from FHIR ``UnitsOfTime`` to openEHR.

Two stateless converters share the ``TimeUnitConverter`` contract:

* ``FrequencyUnitConverter`` turns a period unit into the openEHR frequency
  unit of DV_QUANTITY (``1/s``, ``1/min``, ``1/h``, ``1/d``).
* ``DurationUnitConverter`` turns a unit into its ISO 8601 designator and
  formats full DV_DURATION values (``PT5H``, ``P3D``).
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Protocol

from dosage_mapping.models.fhir import UnitsOfTime

logger = logging.getLogger(__name__)

FREQUENCY_UNITS: dict[UnitsOfTime, str] = {
    UnitsOfTime.SECOND: "1/s",
    UnitsOfTime.MINUTE: "1/min",
    UnitsOfTime.HOUR: "1/h",
    UnitsOfTime.DAY: "1/d",
}

DURATION_DESIGNATORS: dict[UnitsOfTime, str] = {
    UnitsOfTime.SECOND: "S",
    UnitsOfTime.MINUTE: "M",
    UnitsOfTime.HOUR: "H",
    UnitsOfTime.DAY: "D",
    UnitsOfTime.WEEK: "W",
    UnitsOfTime.MONTH: "M",
    UnitsOfTime.YEAR: "Y",
}

# Units written after the ISO 8601 time designator "T"
TIME_COMPONENT_UNITS = frozenset(
    {UnitsOfTime.SECOND, UnitsOfTime.MINUTE, UnitsOfTime.HOUR}
)


class TimeUnitConverter(Protocol):
    """Contract shared by the time unit converters."""

    def is_valid_unit(self, time_unit: UnitsOfTime | None) -> bool:
        """Checks if the unit is supported by this converter."""
        ...

    def convert_unit(self, time_unit: UnitsOfTime | None) -> str | None:
        """Converts the unit, or returns None when it is not supported."""
        ...


class FrequencyUnitConverter:
    """Maps period units to openEHR frequency units."""

    def is_valid_unit(self, time_unit: UnitsOfTime | None) -> bool:
        if time_unit is None:
            return False
        if time_unit not in FREQUENCY_UNITS:
            logger.warning(
                f"Unsupported time unit for frequency conversion: {time_unit.value}"
            )
            return False
        return True

    def convert_unit(self, time_unit: UnitsOfTime | None) -> str | None:
        if not self.is_valid_unit(time_unit):
            return None
        return FREQUENCY_UNITS[time_unit]


class DurationUnitConverter:
    """Maps time units to ISO 8601 duration designators."""

    def is_valid_unit(self, time_unit: UnitsOfTime | None) -> bool:
        # every UnitsOfTime code has a duration designator
        return time_unit is not None

    def convert_unit(self, time_unit: UnitsOfTime | None) -> str | None:
        if not self.is_valid_unit(time_unit):
            return None
        return DURATION_DESIGNATORS[time_unit]

    def format_duration(
        self, value: float | int | Decimal, time_unit: UnitsOfTime | None
    ) -> str | None:
        """
        Formats a magnitude and unit as an ISO 8601 duration.

        The magnitude is rounded half-up to a whole number, however large.

        Args:
            value: The numeric magnitude
            time_unit: The time unit

        Returns:
            The duration (e.g. ``PT5H``, ``P2W``), or None for a missing unit
            or a magnitude that is negative or not finite
        """
        if not self.is_valid_unit(time_unit):
            return None

        amount = Decimal(str(value))
        if not amount.is_finite() or amount < 0:
            logger.debug(f"Cannot format {value} as an ISO 8601 duration")
            return None

        with localcontext() as ctx:
            # room for every integer digit of the magnitude
            ctx.prec = max(ctx.prec, amount.adjusted() + 2)
            magnitude = amount.quantize(Decimal(1), rounding=ROUND_HALF_UP)
        magnitude = magnitude.copy_abs()

        designator = self.convert_unit(time_unit)
        if time_unit in TIME_COMPONENT_UNITS:
            return f"PT{magnitude}{designator}"
        return f"P{magnitude}{designator}"


FREQUENCY_CONVERTER = FrequencyUnitConverter()
DURATION_CONVERTER = DurationUnitConverter()


def is_frequency_valid(time_unit: UnitsOfTime | None) -> bool:
    return FREQUENCY_CONVERTER.is_valid_unit(time_unit)


def frequency_unit(time_unit: UnitsOfTime | None) -> str | None:
    return FREQUENCY_CONVERTER.convert_unit(time_unit)


def is_duration_valid(time_unit: UnitsOfTime | None) -> bool:
    return DURATION_CONVERTER.is_valid_unit(time_unit)


def duration_letter(time_unit: UnitsOfTime | None) -> str | None:
    return DURATION_CONVERTER.convert_unit(time_unit)


def format_duration(
    value: float | int | Decimal, time_unit: UnitsOfTime | None
) -> str | None:
    return DURATION_CONVERTER.format_duration(value, time_unit)
