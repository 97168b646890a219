"""Outcome of a single mapping call."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MappingStatus(str, Enum):
    """Why a mapping call did or did not populate its path."""

    SUCCESS = "success"
    NOTHING_TO_MAP = "nothing_to_map"
    MISSING_FIELD = "missing_field"
    INVALID_UNIT = "invalid_unit"
    TYPE_MISMATCH = "type_mismatch"
    UNFORMATTABLE_VALUE = "unformattable_value"
    UNRECOGNIZED_CODE = "unrecognized_code"
    UNEXPECTED_FAULT = "unexpected_fault"


@dataclass
class MappingResult:
    """
    Rich result of a mapping call.

    Collapses to a boolean (``bool(result)``) at the dispatcher boundary.
    ``writes`` lists the entries committed to the composition, ``skipped``
    names timing sub-fields that were present but could not be mapped.
    """

    status: MappingStatus
    code: str
    path: str
    writes: list[tuple[str, Any]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is MappingStatus.SUCCESS

    def __bool__(self) -> bool:
        return self.ok
