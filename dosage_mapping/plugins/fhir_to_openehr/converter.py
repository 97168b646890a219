from typing import Any

from dosage_mapping.config import MappingSettings
from dosage_mapping.core.common.base_mapper import BaseFormatConverter
from dosage_mapping.core.exceptions import UnrecognizedMappingCodeError

from .codes import MappingCode
from .mappers import (
    AdministrationDurationMapper,
    DoseQuantityToRangeMapper,
    FhirMappingFunction,
    RatioToDvQuantityMapper,
    TimingToDailyNonDailyMapper,
)


def default_mapping_functions() -> list[FhirMappingFunction]:
    """One instance of every built-in mapping function."""
    return [
        AdministrationDurationMapper(),
        RatioToDvQuantityMapper(),
        TimingToDailyNonDailyMapper(),
        DoseQuantityToRangeMapper(),
    ]


class FhirToOpenEhrConverter(BaseFormatConverter):
    """
    Converter for the medication dosage mapping functions.

    Serves the closed set of ``MappingCode`` values; any other code is
    rejected without touching the composition. The openEHR to FHIR
    direction is not implemented.
    """

    def __init__(
        self,
        settings: MappingSettings | None = None,
        mapping_functions: list[FhirMappingFunction] | None = None,
    ) -> None:
        super().__init__(settings)
        functions = (
            mapping_functions
            if mapping_functions is not None
            else default_mapping_functions()
        )
        for function in functions:
            self.register_mapper(function.code.value, function)

    def _resolve_code(self, mapping_code: str) -> str:
        try:
            return MappingCode(mapping_code).value
        except ValueError as e:
            raise UnrecognizedMappingCodeError(
                f"'{mapping_code}' is not one of: "
                f"{', '.join(code.value for code in MappingCode)}"
            ) from e

    def get_plugin_info(self) -> dict[str, Any]:
        """Returns metadata about this converter."""
        return {
            "name": self.__class__.__name__,
            "direction": "fhir_to_openehr",
            "supported_codes": sorted(self._mappers),
            "atomic_writes": self.settings.atomic_writes,
        }
