from dosage_mapping.core.context import MappingContext
from dosage_mapping.core.exceptions import MissingFieldError
from dosage_mapping.models.fhir import Timing, TimingRepeat

from ..codes import MappingCode
from ..dv_time import validate_and_format_dv_time
from ..units.time_units import (
    DURATION_CONVERTER,
    FREQUENCY_CONVERTER,
    DurationUnitConverter,
    FrequencyUnitConverter,
)
from .base import FhirMappingFunction


class TimingToDailyNonDailyMapper(FhirMappingFunction):
    """Map a FHIR Timing onto the openEHR timing_daily / timing_nondaily cluster.

    Every repeat field is mapped on its own; a field that cannot be mapped is
    skipped without affecting the others.
    """

    code = MappingCode.TIMING_TO_DAILY_NON_DAILY
    expected_type = "Timing"
    accepted_types = (Timing,)

    TIME_OF_DAY_SUFFIX = "/zeitpunkt"
    FREQUENCY_SUFFIX = "/frequenz/quantity_value"
    INTERVAL_SUFFIX = "/intervall/duration_value"
    COUNT_SUFFIX = "/dosierungsreihenfolge"

    def __init__(
        self,
        frequency_converter: FrequencyUnitConverter = FREQUENCY_CONVERTER,
        duration_converter: DurationUnitConverter = DURATION_CONVERTER,
    ):
        super().__init__()
        self._frequency_converter = frequency_converter
        self._duration_converter = duration_converter

    def _map_time_of_day(self, repeat: TimingRepeat, context: MappingContext) -> bool:
        """Maps the first timeOfDay entry to a DV_TIME."""
        time_of_day = repeat.first_time_of_day
        if time_of_day is None:
            return False

        formatted_time = validate_and_format_dv_time(time_of_day)
        if formatted_time is None:
            self._logger.warning(
                f"Time value '{time_of_day}' does not conform to DV_TIME format"
            )
            context.skip("timeOfDay")
            return False

        context.set_value(context.sub_path(self.TIME_OF_DAY_SUFFIX), formatted_time)
        self._logger.info(f"Mapped specific time: {formatted_time}")
        return True

    def _map_frequency(self, repeat: TimingRepeat, context: MappingContext) -> bool:
        """Maps frequency (and frequencyMax) to a DV_QUANTITY or its interval."""
        if repeat.frequency is None:
            return False

        unit = self._frequency_converter.convert_unit(repeat.period_unit)
        if unit is None:
            self._logger.warning(
                "Skipping frequency mapping due to missing or unsupported period unit"
            )
            context.skip("frequency")
            return False

        prefix = context.sub_path(self.FREQUENCY_SUFFIX)
        if repeat.frequency_max is not None:
            self._write_quantity(context, f"{prefix}/lower", repeat.frequency, unit)
            self._write_quantity(context, f"{prefix}/upper", repeat.frequency_max, unit)
            self._logger.info(
                f"Mapped frequency range: {repeat.frequency}-"
                f"{repeat.frequency_max} {unit}"
            )
        else:
            self._write_quantity(context, prefix, repeat.frequency, unit)
            self._logger.info(f"Mapped frequency: {repeat.frequency} {unit}")
        return True

    def _map_interval(self, repeat: TimingRepeat, context: MappingContext) -> bool:
        """Maps period (and periodMax) to a DV_DURATION or its interval."""
        if repeat.period is None:
            return False

        if not self._duration_converter.is_valid_unit(repeat.period_unit):
            self._logger.warning(
                "Skipping interval mapping due to missing or unsupported period unit"
            )
            context.skip("period")
            return False

        duration_value = self._duration_converter.format_duration(
            repeat.period, repeat.period_unit
        )
        duration_max_value = (
            self._duration_converter.format_duration(
                repeat.period_max, repeat.period_unit
            )
            if repeat.period_max is not None
            else None
        )
        if duration_value is None or (
            repeat.period_max is not None and duration_max_value is None
        ):
            self._logger.warning(
                "Skipping interval mapping: period cannot be formatted as a duration"
            )
            context.skip("period")
            return False

        prefix = context.sub_path(self.INTERVAL_SUFFIX)
        if repeat.period_max is not None:
            context.set_value(f"{prefix}/lower|value", duration_value)
            context.set_value(f"{prefix}/upper|value", duration_max_value)
            self._logger.info(
                f"Mapped interval range: {duration_value} to {duration_max_value}"
            )
        else:
            context.set_value(f"{prefix}|value", duration_value)
            self._logger.info(f"Mapped interval: {duration_value}")
        return True

    def _map_count(self, repeat: TimingRepeat, context: MappingContext) -> bool:
        if repeat.count is None:
            return False

        context.set_value(context.sub_path(self.COUNT_SUFFIX), repeat.count)
        self._logger.info(f"Mapped dosage sequence count: {repeat.count}")
        return True

    def map_value(self, fhir_value: Timing, context: MappingContext) -> None:
        """Map the repeat component of a FHIR Timing.

        Raises:
            MissingFieldError: If there is no repeat component or none of its
                fields could be mapped.
        """
        self._logger.info("Converting FHIR Timing to openEHR timing_daily")

        repeat = fhir_value.repeat
        if repeat is None:
            raise MissingFieldError(
                "Timing has no repeat component", "repeat", expected=True
            )

        # every field is attempted, no short-circuit
        mapped = [
            self._map_time_of_day(repeat, context),
            self._map_frequency(repeat, context),
            self._map_interval(repeat, context),
            self._map_count(repeat, context),
        ]

        if not any(mapped):
            if context.skipped:
                raise MissingFieldError(
                    "No timing field could be mapped "
                    f"(skipped: {', '.join(context.skipped)})",
                    "repeat",
                )
            raise MissingFieldError(
                "Timing repeat has no mappable fields", "repeat", expected=True
            )
