"""
fhir.py – FHIR R4 dosage/timing source model
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Read-only subset of the FHIR R4 datatypes consumed by the mapping functions.
Attribute names are snake_case; the FHIR camelCase spelling is accepted as
alias so raw resources can be validated directly.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..core.exceptions import SourceValueError

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class UnitsOfTime(str, Enum):
    """FHIR ``UnitsOfTime`` value set (UCUM time units)."""

    SECOND = "s"
    MINUTE = "min"
    HOUR = "h"
    DAY = "d"
    WEEK = "wk"
    MONTH = "mo"
    YEAR = "a"


class SourceKind(str, Enum):
    """Tags for the source value variants accepted by the mapping functions."""

    TIMING = "Timing"
    TIMING_REPEAT = "TimingRepeat"
    RATIO = "Ratio"
    DOSE_AND_RATE = "DoseAndRate"
    RANGE = "Range"
    QUANTITY = "Quantity"


# ---------------------------------------------------------------------------
# Core building blocks
# ---------------------------------------------------------------------------


class FhirElement(BaseModel):
    """Base for all FHIR datatypes in this module."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Quantity(FhirElement):
    """A measured amount (FHIR ``Quantity``)."""

    value: float | None = Field(
        default=None, description="Numerical value (with implicit precision)."
    )
    unit: str | None = Field(default=None, description="Human readable unit.")
    system: str | None = Field(
        default=None, description="System that defines the coded unit form."
    )
    code: str | None = Field(
        default=None, description="Coded form of the unit (usually UCUM)."
    )

    @property
    def has_value(self) -> bool:
        return self.value is not None

    @property
    def display_unit(self) -> str | None:
        """Unit text, falling back to the coded unit."""
        return self.unit if self.unit is not None else self.code


class Ratio(FhirElement):
    """A ratio of two Quantity values (FHIR ``Ratio``)."""

    numerator: Quantity | None = Field(default=None, description="Numerator value.")
    denominator: Quantity | None = Field(
        default=None, description="Denominator value."
    )


class Range(FhirElement):
    """Set of values bounded by low and high (FHIR ``Range``)."""

    low: Quantity | None = Field(default=None, description="Low limit.")
    high: Quantity | None = Field(default=None, description="High limit.")


class TimingRepeat(FhirElement):
    """When the event is to occur (FHIR ``Timing.repeat``)."""

    count: int | None = Field(
        default=None, ge=0, description="Number of times to repeat."
    )
    count_max: int | None = Field(
        default=None, ge=0, description="Maximum number of times to repeat."
    )
    duration: float | None = Field(
        default=None, ge=0, description="How long when it happens."
    )
    duration_max: float | None = Field(
        default=None, ge=0, description="How long when it happens (Max)."
    )
    duration_unit: UnitsOfTime | None = Field(
        default=None, description="Unit of time for duration/durationMax."
    )
    frequency: int | None = Field(
        default=None, ge=0, description="Event occurs frequency times per period."
    )
    frequency_max: int | None = Field(
        default=None, ge=0, description="Event occurs up to frequencyMax times."
    )
    period: float | None = Field(
        default=None, ge=0, description="Event occurs frequency times per period."
    )
    period_max: float | None = Field(
        default=None, ge=0, description="Upper limit of period (3-4 hours)."
    )
    period_unit: UnitsOfTime | None = Field(
        default=None, description="Unit of time for period/periodMax."
    )
    day_of_week: list[str] = Field(
        default_factory=list, description="mon | tue | wed | thu | fri | sat | sun"
    )
    time_of_day: list[str | None] = Field(
        default_factory=list, description="Time of day for action."
    )
    when: list[str] = Field(
        default_factory=list, description="Code for time period of occurrence."
    )
    offset: int | None = Field(
        default=None, ge=0, description="Minutes from event (before or after)."
    )

    @property
    def first_time_of_day(self) -> str | None:
        return self.time_of_day[0] if self.time_of_day else None


class Timing(FhirElement):
    """A timing schedule that specifies an event that may occur multiple times."""

    event: list[str] = Field(
        default_factory=list, description="When the event occurs."
    )
    repeat: TimingRepeat | None = Field(
        default=None, description="When the event is to occur."
    )
    code: dict[str, Any] | None = Field(
        default=None, description="BID | TID | QID | AM | PM | QD | QOD | +"
    )


class DoseAndRate(FhirElement):
    """Amount of medication administered (FHIR ``Dosage.doseAndRate``)."""

    type: dict[str, Any] | None = Field(
        default=None, description="The kind of dose or rate specified."
    )
    dose_range: Range | None = Field(default=None, description="Amount of medication.")
    dose_quantity: Quantity | None = Field(
        default=None, description="Amount of medication."
    )
    rate_ratio: Ratio | None = Field(
        default=None, description="Amount of medication per unit of time."
    )
    rate_range: Range | None = Field(
        default=None, description="Amount of medication per unit of time."
    )
    rate_quantity: Quantity | None = Field(
        default=None, description="Amount of medication per unit of time."
    )

    @model_validator(mode="after")
    def _single_choice(self) -> DoseAndRate:
        # dose[x] and rate[x] are choice elements
        doses = [d for d in (self.dose_range, self.dose_quantity) if d is not None]
        if len(doses) > 1:
            raise ValueError("Only one of doseRange / doseQuantity may be set.")
        rates = [
            r
            for r in (self.rate_ratio, self.rate_range, self.rate_quantity)
            if r is not None
        ]
        if len(rates) > 1:
            raise ValueError(
                "Only one of rateRatio / rateRange / rateQuantity may be set."
            )
        return self

    @property
    def dose(self) -> Range | Quantity | None:
        return self.dose_range if self.dose_range is not None else self.dose_quantity

    @property
    def rate(self) -> Ratio | Range | Quantity | None:
        for candidate in (self.rate_ratio, self.rate_range, self.rate_quantity):
            if candidate is not None:
                return candidate
        return None


SourceValue = Timing | TimingRepeat | Ratio | DoseAndRate | Range | Quantity

_KIND_TO_MODEL: dict[SourceKind, type[FhirElement]] = {
    SourceKind.TIMING: Timing,
    SourceKind.TIMING_REPEAT: TimingRepeat,
    SourceKind.RATIO: Ratio,
    SourceKind.DOSE_AND_RATE: DoseAndRate,
    SourceKind.RANGE: Range,
    SourceKind.QUANTITY: Quantity,
}


def parse_source_value(kind: SourceKind | str, data: dict[str, Any]) -> SourceValue:
    """
    Build a source value of the given kind from raw FHIR JSON.

    Args:
        kind: The variant tag (e.g. ``"Timing"`` or ``SourceKind.RATIO``)
        data: FHIR JSON object for that datatype

    Returns:
        The validated, immutable source model

    Raises:
        SourceValueError: If the kind is unknown or the data does not validate
    """
    try:
        source_kind = SourceKind(kind)
    except ValueError as e:
        available = ", ".join(k.value for k in SourceKind)
        raise SourceValueError(
            f"Unknown source value type '{kind}'. Available types: {available}"
        ) from e

    if not isinstance(data, dict):
        raise SourceValueError(
            f"{source_kind.value} value must be a JSON object, "
            f"got {type(data).__name__}"
        )

    try:
        return _KIND_TO_MODEL[source_kind].model_validate(data)
    except ValidationError as e:
        raise SourceValueError(f"Invalid {source_kind.value} value: {e}") from e


def source_kind_of(value: object) -> str:
    """Readable type name of a source value, for diagnostics."""
    if value is None:
        return "None"
    for kind, model in _KIND_TO_MODEL.items():
        if type(value) is model:
            return kind.value
    return type(value).__name__
