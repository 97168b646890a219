from __future__ import annotations

import pytest

from dosage_mapping.core.context import MappingContext
from dosage_mapping.core.exceptions import (
    InvalidUnitError,
    MissingFieldError,
    UnformattableValueError,
)
from dosage_mapping.models.fhir import Timing, TimingRepeat, UnitsOfTime
from dosage_mapping.models.flat_composition import FlatComposition
from dosage_mapping.plugins.fhir_to_openehr.codes import MappingCode
from dosage_mapping.plugins.fhir_to_openehr.mappers.administration_duration import (
    AdministrationDurationMapper,
)
from dosage_mapping.plugins.fhir_to_openehr.units.time_units import (
    DurationUnitConverter,
)

PATH = "medikamentenliste/medikament/dosierung/verabreichungsdauer"


class RejectingDurationConverter(DurationUnitConverter):
    """Duration converter that supports no unit at all."""

    def is_valid_unit(self, time_unit: UnitsOfTime | None) -> bool:
        return False


class FlakyDurationConverter(DurationUnitConverter):
    """Accepts every unit but cannot format upper bounds."""

    def format_duration(self, value, time_unit):
        if value > 10:
            return None
        return super().format_duration(value, time_unit)


@pytest.fixture()
def context() -> MappingContext:
    return MappingContext(
        code=MappingCode.DOSAGE_DURATION_TO_ADMINISTRATION_DURATION.value,
        path=PATH,
        composition=FlatComposition(),
    )


class TestAdministrationDurationMapper:
    def test_accepts_timing_repeat_only(self) -> None:
        mapper = AdministrationDurationMapper()
        assert mapper.can_map(TimingRepeat()) is True
        assert mapper.can_map(Timing()) is False

    def test_single_duration(self, context: MappingContext) -> None:
        mapper = AdministrationDurationMapper()
        mapper.map_value(
            TimingRepeat(duration=5, duration_unit=UnitsOfTime.HOUR), context
        )
        assert context.commit() == [(f"{PATH}/duration_value|value", "PT5H")]

    def test_duration_range(self, context: MappingContext) -> None:
        mapper = AdministrationDurationMapper()
        mapper.map_value(
            TimingRepeat(duration=1, duration_max=3, duration_unit=UnitsOfTime.DAY),
            context,
        )
        context.commit()
        assert context.composition.to_dict() == {
            f"{PATH}/duration_value/lower|value": "P1D",
            f"{PATH}/duration_value/upper|value": "P3D",
        }

    def test_missing_duration_is_nothing_to_map(self, context: MappingContext) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            AdministrationDurationMapper().map_value(TimingRepeat(count=2), context)
        assert exc_info.value.expected is True

    def test_missing_unit_fails(self, context: MappingContext) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            AdministrationDurationMapper().map_value(TimingRepeat(duration=5), context)
        assert exc_info.value.expected is False
        assert exc_info.value.field_name == "durationUnit"
        assert context.pending == []

    def test_rejected_unit_fails(self, context: MappingContext) -> None:
        mapper = AdministrationDurationMapper(RejectingDurationConverter())
        with pytest.raises(InvalidUnitError):
            mapper.map_value(
                TimingRepeat(duration=5, duration_unit=UnitsOfTime.HOUR), context
            )

    def test_range_is_formatted_before_writing(self, context: MappingContext) -> None:
        mapper = AdministrationDurationMapper(FlakyDurationConverter())
        with pytest.raises(UnformattableValueError):
            mapper.map_value(
                TimingRepeat(
                    duration=5, duration_max=20, duration_unit=UnitsOfTime.MINUTE
                ),
                context,
            )
        assert context.pending == []
