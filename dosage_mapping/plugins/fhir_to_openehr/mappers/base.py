"""
Base class for the FHIR to openEHR mapping functions.

Each mapping function declares the code it serves and the source types it
accepts; the converter checks ``can_map`` before calling ``map_value``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from dosage_mapping.core.context import MappingContext
from dosage_mapping.core.protocols import MappingFunction

from ..codes import MappingCode

logger = logging.getLogger(__name__)


class FhirMappingFunction(MappingFunction, ABC):
    """Common plumbing shared by the mapping functions."""

    code: ClassVar[MappingCode]
    expected_type: ClassVar[str]
    accepted_types: ClassVar[tuple[type, ...]]

    def __init__(self):
        """Initialize the mapping function."""
        self._logger = logger.getChild(self.__class__.__name__)

    def can_map(self, fhir_value: Any) -> bool:
        return isinstance(fhir_value, self.accepted_types)

    @abstractmethod
    def map_value(self, fhir_value: Any, context: MappingContext) -> None:
        pass

    def _write_quantity(
        self, context: MappingContext, prefix: str, magnitude: Any, unit: str | None
    ) -> None:
        """Writes ``prefix|magnitude`` and, when a unit is known, ``prefix|unit``."""
        context.set_value(f"{prefix}|magnitude", magnitude)
        if unit:
            context.set_value(f"{prefix}|unit", unit)
