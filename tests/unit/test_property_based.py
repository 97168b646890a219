"""Property-based tests for the value formatting helpers."""

from __future__ import annotations

import re

from hypothesis import given
from hypothesis import strategies as st

from dosage_mapping.models.fhir import UnitsOfTime
from dosage_mapping.plugins.fhir_to_openehr.dv_time import (
    EXTENDED_TIME,
    validate_and_format_dv_time,
)
from dosage_mapping.plugins.fhir_to_openehr.units.rate_units import (
    normalize_rate_unit,
)
from dosage_mapping.plugins.fhir_to_openehr.units.time_units import format_duration

ISO_DURATION = re.compile(r"P(?:T[0-9]+[HMS]|[0-9]+[DWMY])")

hours = st.integers(min_value=0, max_value=23)
sixty = st.integers(min_value=0, max_value=59)


@st.composite
def compact_times(draw) -> str:
    text = f"{draw(hours):02d}{draw(sixty):02d}{draw(sixty):02d}"
    if draw(st.booleans()):
        text += "." + draw(st.text(alphabet="0123456789", min_size=1, max_size=4))
    zone = draw(st.sampled_from(["", "Z", "+", "-"]))
    if zone in ("+", "-"):
        text += f"{zone}{draw(hours):02d}"
        if draw(st.booleans()):
            text += f"{draw(sixty):02d}"
    else:
        text += zone
    return text


@given(compact_times())
def test_compact_times_become_extended(value: str) -> None:
    formatted = validate_and_format_dv_time(value)
    assert formatted is not None
    assert EXTENDED_TIME.fullmatch(formatted)
    assert validate_and_format_dv_time(formatted) == formatted


@given(st.text(max_size=12))
def test_result_is_none_or_valid_extended_time(value: str) -> None:
    formatted = validate_and_format_dv_time(value)
    assert formatted is None or EXTENDED_TIME.fullmatch(formatted)


@given(
    st.integers(min_value=0, max_value=10_000),
    st.sampled_from(list(UnitsOfTime)),
)
def test_durations_are_iso_8601(value: int, unit: UnitsOfTime) -> None:
    formatted = format_duration(value, unit)
    assert ISO_DURATION.fullmatch(formatted)
    assert formatted.startswith("PT") is (
        unit in {UnitsOfTime.SECOND, UnitsOfTime.MINUTE, UnitsOfTime.HOUR}
    )


@given(st.text(alphabet="abcdeghilmnorstuy /", max_size=20))
def test_rate_unit_normalisation_is_idempotent(unit: str) -> None:
    once = normalize_rate_unit(unit)
    assert normalize_rate_unit(once) == once
