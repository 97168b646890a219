from dosage_mapping.core.context import MappingContext
from dosage_mapping.core.exceptions import (
    InvalidUnitError,
    MissingFieldError,
    UnformattableValueError,
)
from dosage_mapping.models.fhir import TimingRepeat

from ..codes import MappingCode
from ..units.time_units import DURATION_CONVERTER, DurationUnitConverter
from .base import FhirMappingFunction


class AdministrationDurationMapper(FhirMappingFunction):
    """Map Timing.repeat duration/durationMax to the openEHR administration
    duration (DV_DURATION or its interval).
    """

    code = MappingCode.DOSAGE_DURATION_TO_ADMINISTRATION_DURATION
    expected_type = "TimingRepeat"
    accepted_types = (TimingRepeat,)

    DURATION_SUFFIX = "/duration_value"

    def __init__(self, duration_converter: DurationUnitConverter = DURATION_CONVERTER):
        super().__init__()
        self._duration_converter = duration_converter

    def _format(self, value: float, repeat: TimingRepeat) -> str:
        formatted = self._duration_converter.format_duration(
            value, repeat.duration_unit
        )
        if formatted is None:
            raise UnformattableValueError(
                f"Cannot format duration {value} {repeat.duration_unit}"
            )
        return formatted

    def map_value(self, fhir_value: TimingRepeat, context: MappingContext) -> None:
        self._logger.info("Converting timing repeat to administration duration")
        repeat = fhir_value

        if repeat.duration is None:
            raise MissingFieldError(
                "No duration found in timing repeat", "duration", expected=True
            )

        if repeat.duration_unit is None:
            raise MissingFieldError(
                "Duration has no unit; cannot build an ISO 8601 duration",
                "durationUnit",
            )
        if not self._duration_converter.is_valid_unit(repeat.duration_unit):
            raise InvalidUnitError(
                f"Unsupported duration unit: {repeat.duration_unit}",
                repeat.duration_unit,
            )

        prefix = context.sub_path(self.DURATION_SUFFIX)
        if repeat.duration_max is not None:
            # format both bounds before writing either
            lower = self._format(repeat.duration, repeat)
            upper = self._format(repeat.duration_max, repeat)
            context.set_value(f"{prefix}/lower|value", lower)
            context.set_value(f"{prefix}/upper|value", upper)
            self._logger.info(f"Mapped administration duration: {lower} to {upper}")
        else:
            duration = self._format(repeat.duration, repeat)
            context.set_value(f"{prefix}|value", duration)
            self._logger.info(f"Mapped administration duration: {duration}")
