"""Unit tests for BaseFormatConverter abstract class."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from dosage_mapping.config import MappingSettings
from dosage_mapping.core.common.base_mapper import BaseFormatConverter
from dosage_mapping.core.context import MappingContext
from dosage_mapping.core.exceptions import (
    InvalidUnitError,
    MappingError,
    MissingFieldError,
    UnformattableValueError,
    UnrecognizedMappingCodeError,
)
from dosage_mapping.core.result import MappingStatus
from dosage_mapping.models.flat_composition import FlatComposition

# -------------------- Fakes / helpers --------------------


class FakeMappingFunction:
    """Configurable MappingFunction fake that writes two entries."""

    code = "fake"
    expected_type = "str"

    def __init__(
        self,
        can_map_result: bool = True,
        raise_after_first_write: Exception | None = None,
    ):
        self.can_map_result = can_map_result
        self.raise_after_first_write = raise_after_first_write
        self.calls: list[tuple[Any, str]] = []

    def can_map(self, fhir_value: Any) -> bool:
        return self.can_map_result

    def map_value(self, fhir_value: Any, context: MappingContext) -> None:
        self.calls.append((fhir_value, context.path))
        context.set_value(context.sub_path("|first"), fhir_value)
        if self.raise_after_first_write is not None:
            raise self.raise_after_first_write
        context.set_value(context.sub_path("|second"), fhir_value)


class ConcreteConverter(BaseFormatConverter):
    """Converter serving any code starting with 'fake'."""

    def _resolve_code(self, mapping_code: str) -> str:
        if not mapping_code.startswith("fake"):
            raise UnrecognizedMappingCodeError(f"unknown: {mapping_code}")
        return mapping_code


def converter_with(
    mapper: FakeMappingFunction, atomic: bool = True
) -> ConcreteConverter:
    converter = ConcreteConverter(MappingSettings(atomic_writes=atomic))
    converter.register_mapper("fake", mapper)
    return converter


# --------------------------- Tests ---------------------------


class TestRegistry:
    def test_register_and_get_registered_mappers(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.DEBUG)
        converter = ConcreteConverter()
        m1 = FakeMappingFunction()
        converter.register_mapper("fake", m1)
        assert converter.get_registered_mappers()["fake"] is m1
        assert any(
            "Registering mapping function" in r.message for r in caplog.records
        )

    def test_register_overwrite_logs_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.WARNING)
        converter = ConcreteConverter()
        second = FakeMappingFunction()
        converter.register_mapper("fake", FakeMappingFunction())
        converter.register_mapper("fake", second)
        assert converter.get_registered_mappers()["fake"] is second
        assert any(
            "Overwriting mapping function for code: 'fake'" in r.message
            for r in caplog.records
        )

    def test_default_settings_are_atomic(self) -> None:
        assert ConcreteConverter().settings.atomic_writes is True


class TestDispatch:
    def test_success_commits_writes(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO)
        mapper = FakeMappingFunction()
        converter = converter_with(mapper)
        sink: dict[str, Any] = {}

        result = converter.map_value("fake", "a/b", "x", "DV_TEXT", sink)

        assert result.status is MappingStatus.SUCCESS
        assert bool(result) is True
        assert result.writes == [("a/b|first", "x"), ("a/b|second", "x")]
        assert sink == {"a/b|first": "x", "a/b|second": "x"}
        assert mapper.calls == [("x", "a/b")]
        assert any(
            "Applying FHIR to openEHR mapping function: fake" in r.message
            for r in caplog.records
        )

    def test_apply_returns_bool(self) -> None:
        converter = converter_with(FakeMappingFunction())
        composition = FlatComposition()
        assert converter.apply_fhir_to_openehr("fake", "p", "x", None, composition)
        assert composition.get("p|second") == "x"

    def test_unknown_code_leaves_sink_untouched(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.WARNING)
        mapper = FakeMappingFunction()
        converter = converter_with(mapper)
        sink = {"existing": 1}

        result = converter.map_value("other", "p", "x", None, sink)

        assert result.status is MappingStatus.UNRECOGNIZED_CODE
        assert sink == {"existing": 1}
        assert mapper.calls == []
        assert any("Unknown mapping code: other" in r.message for r in caplog.records)

    def test_known_but_unregistered_code(self) -> None:
        converter = converter_with(FakeMappingFunction())
        result = converter.map_value("fake_two", "p", "x", None, {})
        assert result.status is MappingStatus.UNRECOGNIZED_CODE

    def test_type_mismatch(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING)
        mapper = FakeMappingFunction(can_map_result=False)
        converter = converter_with(mapper)
        sink: dict[str, Any] = {}

        result = converter.map_value("fake", "p", 42, None, sink)

        assert result.status is MappingStatus.TYPE_MISMATCH
        assert result.message == "Expected str but got: int"
        assert sink == {}
        assert mapper.calls == []


class TestFailures:
    @pytest.mark.parametrize(
        "error, status",
        [
            (MissingFieldError("gone", "field"), MappingStatus.MISSING_FIELD),
            (InvalidUnitError("bad unit"), MappingStatus.INVALID_UNIT),
            (UnformattableValueError("bad"), MappingStatus.UNFORMATTABLE_VALUE),
            (MappingError("other"), MappingStatus.UNEXPECTED_FAULT),
        ],
    )
    def test_error_to_status(
        self, error: MappingError, status: MappingStatus
    ) -> None:
        converter = converter_with(FakeMappingFunction(raise_after_first_write=error))
        result = converter.map_value("fake", "p", "x", None, {})
        assert result.status is status
        assert result.ok is False

    def test_expected_missing_field_is_nothing_to_map(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO)
        error = MissingFieldError("nothing here", "repeat", expected=True)
        converter = converter_with(FakeMappingFunction(raise_after_first_write=error))

        result = converter.map_value("fake", "p", "x", None, {})

        assert result.status is MappingStatus.NOTHING_TO_MAP
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_atomic_failure_discards_staged_writes(self) -> None:
        error = MissingFieldError("gone", "high")
        converter = converter_with(FakeMappingFunction(raise_after_first_write=error))
        sink: dict[str, Any] = {}

        result = converter.map_value("fake", "p", "x", None, sink)

        assert sink == {}
        assert result.writes == []

    def test_partial_writes_survive_failure(self) -> None:
        error = MissingFieldError("gone", "high")
        converter = converter_with(
            FakeMappingFunction(raise_after_first_write=error), atomic=False
        )
        sink: dict[str, Any] = {}

        result = converter.map_value("fake", "p", "x", None, sink)

        assert result.ok is False
        assert sink == {"p|first": "x"}
        assert result.writes == [("p|first", "x")]

    def test_unexpected_exception_is_contained(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.ERROR)
        converter = converter_with(
            FakeMappingFunction(raise_after_first_write=RuntimeError("boom"))
        )
        sink: dict[str, Any] = {}

        result = converter.map_value("fake", "p", "x", None, sink)

        assert result.status is MappingStatus.UNEXPECTED_FAULT
        assert result.message == "boom"
        assert sink == {}
        assert any(
            "Error in mapping function fake: boom" in r.message
            for r in caplog.records
        )


class TestReverseDirection:
    def test_openehr_to_fhir_is_disabled(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO)
        converter = ConcreteConverter()
        assert converter.apply_openehr_to_fhir("fake", "p", {}, "Dosage", {}) is None
        assert any("currently disabled" in r.message for r in caplog.records)
