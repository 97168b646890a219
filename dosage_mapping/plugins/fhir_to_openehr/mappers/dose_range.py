from dosage_mapping.core.context import MappingContext
from dosage_mapping.core.exceptions import MissingFieldError
from dosage_mapping.models.fhir import Quantity, Range

from ..codes import MappingCode
from .base import FhirMappingFunction


class DoseQuantityToRangeMapper(FhirMappingFunction):
    """Map a dose (FHIR Range or Quantity) to an openEHR DV_QUANTITY or
    DV_INTERVAL<DV_QUANTITY>.
    """

    code = MappingCode.DOSAGE_QUANTITY_TO_RANGE
    expected_type = "Range or Quantity"
    accepted_types = (Range, Quantity)

    QUANTITY_SUFFIX = "/quantity_value"

    def map_value(self, fhir_value: Range | Quantity, context: MappingContext) -> None:
        if isinstance(fhir_value, Range):
            self._map_range(fhir_value, context)
        else:
            self._map_quantity(fhir_value, context)

    def _map_range(self, dose: Range, context: MappingContext) -> None:
        """Writes the lower bound, then the upper bound; both are required."""
        self._logger.info("Converting FHIR Range to openEHR quantity interval")
        prefix = context.sub_path(self.QUANTITY_SUFFIX)

        if dose.low is None or dose.low.value is None:
            raise MissingFieldError("Range has no low value", "low")
        self._write_quantity(
            context, f"{prefix}/lower", dose.low.value, dose.low.display_unit
        )

        if dose.high is None or dose.high.value is None:
            raise MissingFieldError("Range has no high value", "high")
        self._write_quantity(
            context, f"{prefix}/upper", dose.high.value, dose.high.display_unit
        )

        self._logger.info(
            f"Mapped dose range: {dose.low.value}-{dose.high.value} "
            f"{dose.high.display_unit or ''}".rstrip()
        )

    def _map_quantity(self, dose: Quantity, context: MappingContext) -> None:
        self._logger.info("Converting FHIR Quantity to openEHR quantity")

        if dose.value is None:
            raise MissingFieldError("Quantity has no value", "value")
        prefix = context.sub_path(self.QUANTITY_SUFFIX)
        self._write_quantity(context, prefix, dose.value, dose.display_unit)
        self._logger.info(
            f"Mapped dose quantity: {dose.value} {dose.display_unit or ''}".rstrip()
        )
