from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from dosage_mapping.core.context import MappingContext
    from dosage_mapping.models.flat_composition import FlatComposition


class MappingFunction(Protocol):
    """Defines the contract for one FHIR to openEHR mapping function."""

    code: str
    expected_type: str

    def can_map(self, fhir_value: Any) -> bool:
        """
        Checks whether this function accepts the given source value.

        Args:
            fhir_value: The FHIR value handed to the dispatcher.

        Returns:
            True if the value has a supported shape, False otherwise.
        """

        ...

    def map_value(self, fhir_value: Any, context: "MappingContext") -> None:
        """
        Map a source value into the composition through the context.

        Args:
            fhir_value: The FHIR value, already checked with ``can_map``
            context: Per-call context holding the target path and the
                    staged writes

        Raises:
            MappingError: If the value cannot be mapped
        """
        ...


class FormatConverter(Protocol):
    """Defines the contract of a converter between FHIR and openEHR."""

    def apply_fhir_to_openehr(
        self,
        mapping_code: str,
        openehr_path: str,
        fhir_value: Any,
        openehr_type: str | None,
        flat_composition: "FlatComposition | MutableMapping[str, Any]",
    ) -> bool:
        """
        Runs the mapping function named by ``mapping_code``.
        This method modifies the composition directly.
        """
        ...

    def apply_openehr_to_fhir(
        self,
        mapping_code: str,
        openehr_path: str,
        flat_composition: MutableMapping[str, Any],
        fhir_path: str,
        target_resource: Any,
    ) -> Any:
        """Reverse direction; returns the FHIR value or None."""
        ...

    def register_mapper(self, mapping_code: str, mapper: MappingFunction) -> None:
        """
        Register a mapping function for a mapping code.

        Args:
            mapping_code: The code callers use (e.g., 'ratio_to_dv_quantity')
            mapper: The function that handles this code
        """
        ...

    def get_registered_mappers(self) -> dict[str, MappingFunction]:
        """
        Get all registered mapping functions.

        Returns:
            Dictionary mapping codes to their functions
        """
        ...
