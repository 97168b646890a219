"""Extraction and validation of FHIR Ratio components."""

from dataclasses import dataclass

from dosage_mapping.core.exceptions import TypeMismatchError
from dosage_mapping.models.fhir import Quantity, Ratio, source_kind_of


@dataclass(frozen=True)
class RatioValidation:
    """Numerator and denominator of a ratio, with a validity flag per side."""

    numerator_value: float | None = None
    numerator_unit: str = ""
    numerator_valid: bool = False

    denominator_value: float | None = None
    denominator_unit: str = ""
    denominator_valid: bool = False

    @property
    def has_units(self) -> bool:
        """Both sides carry a unit."""
        return bool(self.numerator_unit) and bool(self.denominator_unit)


def _side(quantity: Quantity | None) -> tuple[float | None, str, bool]:
    if quantity is None or quantity.value is None:
        return None, "", False
    return quantity.value, quantity.display_unit or "", True


def validate_ratio(fhir_value: object, context: str) -> RatioValidation:
    """
    Validates a FHIR Ratio and extracts its components.

    A side is valid when the quantity is present with a value; its unit falls
    back to the coded unit and is empty if neither is set.

    Args:
        fhir_value: The value expected to be a Ratio
        context: What the ratio is validated for, used in log messages

    Raises:
        TypeMismatchError: If the value is not a Ratio
    """
    if not isinstance(fhir_value, Ratio):
        raise TypeMismatchError(f"Ratio for {context}", source_kind_of(fhir_value))

    num_value, num_unit, num_valid = _side(fhir_value.numerator)
    den_value, den_unit, den_valid = _side(fhir_value.denominator)

    return RatioValidation(
        numerator_value=num_value,
        numerator_unit=num_unit,
        numerator_valid=num_valid,
        denominator_value=den_value,
        denominator_unit=den_unit,
        denominator_valid=den_valid,
    )
