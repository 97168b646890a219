from typing import Any

from dosage_mapping.core.context import MappingContext
from dosage_mapping.core.exceptions import (
    InvalidUnitError,
    MissingFieldError,
    UnformattableValueError,
)
from dosage_mapping.models.fhir import DoseAndRate, Ratio

from ..codes import MappingCode
from ..ratio_validation import RatioValidation, validate_ratio
from ..units.rate_units import (
    ALLOWED_RATE_UNITS,
    build_rate_unit,
    is_allowed_rate_unit,
)
from .base import FhirMappingFunction


def format_number(value: float) -> str:
    """Render whole numbers without a fractional part (600.0 -> "600")."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class RatioToDvQuantityMapper(FhirMappingFunction):
    """Map a FHIR Ratio to openEHR.

    * A ``Dosage.doseAndRate`` carrying ``rateRatio`` becomes an administration
      rate DV_QUANTITY (magnitude = numerator / denominator), restricted to
      the supported rate units.
    * A bare Ratio is written as text, e.g. ``"600 mg/h"``, directly at the
      target path.
    """

    code = MappingCode.RATIO_TO_DV_QUANTITY
    expected_type = "Ratio or DoseAndRate with rateRatio"
    accepted_types = (Ratio, DoseAndRate)

    QUANTITY_SUFFIX = "/quantity_value"

    def can_map(self, fhir_value: Any) -> bool:
        if isinstance(fhir_value, DoseAndRate):
            return fhir_value.rate_ratio is not None
        return isinstance(fhir_value, Ratio)

    def map_value(
        self, fhir_value: Ratio | DoseAndRate, context: MappingContext
    ) -> None:
        if isinstance(fhir_value, DoseAndRate):
            self._map_rate_ratio(fhir_value.rate_ratio, context)
        else:
            self._map_plain_ratio(fhir_value, context)

    def _map_rate_ratio(self, rate: Ratio | None, context: MappingContext) -> None:
        self._logger.info("Converting FHIR rateRatio to openEHR administration rate")
        validation = validate_ratio(rate, "rate ratio conversion")

        if not (validation.numerator_valid and validation.denominator_valid):
            raise MissingFieldError(
                "Rate ratio requires numerator and denominator values", "rateRatio"
            )
        if not validation.has_units:
            raise InvalidUnitError(
                "Rate ratio requires units on numerator and denominator"
            )
        if validation.denominator_value == 0:
            raise UnformattableValueError("Rate ratio denominator is zero")

        unit = build_rate_unit(validation.numerator_unit, validation.denominator_unit)
        if not is_allowed_rate_unit(unit):
            raise InvalidUnitError(
                f"Unsupported rate unit '{unit}'. "
                f"Allowed: {', '.join(sorted(ALLOWED_RATE_UNITS))}",
                unit,
            )

        magnitude = validation.numerator_value / validation.denominator_value
        self._write_quantity(
            context, context.sub_path(self.QUANTITY_SUFFIX), magnitude, unit
        )
        self._logger.info(f"Mapped administration rate: {magnitude} {unit}")

    def _map_plain_ratio(self, ratio: Ratio, context: MappingContext) -> None:
        self._logger.info("Converting FHIR Ratio to openEHR text")
        validation = validate_ratio(ratio, "ratio conversion")

        if not validation.numerator_valid:
            raise MissingFieldError("Ratio has no numerator value", "numerator")

        formatted_rate = self._format_ratio(validation)
        context.set_value(context.path, formatted_rate)
        self._logger.info(
            f"Mapped Ratio to administration rate: path={context.path}, "
            f"value={formatted_rate}"
        )

    @staticmethod
    def _format_ratio(validation: RatioValidation) -> str:
        """Formats a ratio as ``"<value> <unit>[/<denominator unit>]"``."""
        formatted = format_number(validation.numerator_value)
        if validation.numerator_unit:
            formatted += f" {validation.numerator_unit}"
        if validation.denominator_valid:
            formatted += f"/{validation.denominator_unit}"
        return formatted
