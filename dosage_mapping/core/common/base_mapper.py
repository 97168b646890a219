import logging
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from typing import Any

from dosage_mapping.config import MappingSettings
from dosage_mapping.models.fhir import source_kind_of
from dosage_mapping.models.flat_composition import FlatComposition

from ..context import MappingContext
from ..exceptions import (
    InvalidUnitError,
    MappingError,
    MissingFieldError,
    TypeMismatchError,
    UnformattableValueError,
    UnrecognizedMappingCodeError,
)
from ..protocols import FormatConverter, MappingFunction
from ..result import MappingResult, MappingStatus

logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[MappingError], MappingStatus] = {
    TypeMismatchError: MappingStatus.TYPE_MISMATCH,
    MissingFieldError: MappingStatus.MISSING_FIELD,
    InvalidUnitError: MappingStatus.INVALID_UNIT,
    UnformattableValueError: MappingStatus.UNFORMATTABLE_VALUE,
}


class BaseFormatConverter(FormatConverter, ABC):
    """
    Base class for format converters acting as a dispatcher.

    Keeps the registry of mapping functions, selects one per call and turns
    every error raised inside it into a failed ``MappingResult``.

    Subclasses must implement:
    - _resolve_code(): Validate a raw mapping code against the closed set of
      codes the converter serves.
    """

    def __init__(self, settings: MappingSettings | None = None):
        """Initializes the converter and the mapping function registry."""
        self._logger = logger.getChild(self.__class__.__name__)
        self._mappers: dict[str, MappingFunction] = {}
        self._settings = settings if settings is not None else MappingSettings()

    @property
    def settings(self) -> MappingSettings:
        return self._settings

    # --- Protocol Implementation (Common Logic) ---

    def register_mapper(self, mapping_code: str, mapper: MappingFunction) -> None:
        """Registers the mapping function serving a mapping code."""
        if mapping_code in self._mappers:
            self._logger.warning(
                f"Overwriting mapping function for code: '{mapping_code}'"
            )
        self._logger.debug(
            f"Registering mapping function '{mapper.__class__.__name__}' "
            f"for code '{mapping_code}'"
        )

        self._mappers[mapping_code] = mapper

    def get_registered_mappers(self) -> dict[str, MappingFunction]:
        """Returns the dictionary of registered mapping functions."""
        return self._mappers

    def apply_fhir_to_openehr(
        self,
        mapping_code: str,
        openehr_path: str,
        fhir_value: Any,
        openehr_type: str | None,
        flat_composition: FlatComposition | MutableMapping[str, Any],
    ) -> bool:
        """
        Runs one mapping function and reports whether the path was populated.

        Never raises: a False result means "this path was not populated".
        """
        return self.map_value(
            mapping_code, openehr_path, fhir_value, openehr_type, flat_composition
        ).ok

    def apply_openehr_to_fhir(
        self,
        mapping_code: str,
        openehr_path: str,
        flat_composition: MutableMapping[str, Any],
        fhir_path: str,
        target_resource: Any,
    ) -> Any:
        self._logger.info("openEHR to FHIR mapping is currently disabled")
        return None

    def map_value(
        self,
        mapping_code: str,
        openehr_path: str,
        fhir_value: Any,
        openehr_type: str | None,
        flat_composition: FlatComposition | MutableMapping[str, Any],
    ) -> MappingResult:
        """
        Runs one mapping function and returns the detailed outcome.

        1. Resolves the code and looks up the registered function.
        2. Checks the source shape with `can_map`.
        3. Lets the function write through a `MappingContext`, committing
           the writes on success and discarding staged ones on failure.
        """
        self._logger.info(f"Applying FHIR to openEHR mapping function: {mapping_code}")
        self._logger.debug(
            f"openEHR path: {openehr_path}, value type: "
            f"{source_kind_of(fhir_value)}, openEHR type: {openehr_type}"
        )

        try:
            code = self._resolve_code(mapping_code)
            mapper = self._mappers.get(code)
            if mapper is None:
                raise UnrecognizedMappingCodeError(
                    f"No mapping function registered for code: {mapping_code}"
                )
        except UnrecognizedMappingCodeError as e:
            self._logger.warning(f"Unknown mapping code: {mapping_code} ({e})")
            return MappingResult(
                status=MappingStatus.UNRECOGNIZED_CODE,
                code=str(mapping_code),
                path=openehr_path,
                message=str(e),
            )

        context = MappingContext(
            code=code,
            path=openehr_path,
            composition=FlatComposition.wrap(flat_composition),
            openehr_type=openehr_type,
            atomic=self._settings.atomic_writes,
        )

        try:
            if not mapper.can_map(fhir_value):
                raise TypeMismatchError(
                    mapper.expected_type, source_kind_of(fhir_value)
                )
            mapper.map_value(fhir_value, context)
        except MappingError as e:
            context.discard()
            return self._failure(context, e)
        except Exception as e:
            context.discard()
            self._logger.error(
                f"Error in mapping function {code}: {e}", exc_info=True
            )
            return MappingResult(
                status=MappingStatus.UNEXPECTED_FAULT,
                code=code,
                path=openehr_path,
                writes=list(context.written),
                message=str(e),
            )

        writes = context.commit()
        return MappingResult(
            status=MappingStatus.SUCCESS,
            code=code,
            path=openehr_path,
            writes=writes,
            skipped=list(context.skipped),
        )

    def _failure(self, context: MappingContext, error: MappingError) -> MappingResult:
        """Logs a mapping error and converts it to a result."""
        status = _ERROR_STATUS.get(type(error), MappingStatus.UNEXPECTED_FAULT)

        if isinstance(error, MissingFieldError) and error.expected:
            status = MappingStatus.NOTHING_TO_MAP
            self._logger.info(f"{context.code}: {error}")
        elif status is MappingStatus.UNEXPECTED_FAULT:
            self._logger.error(f"Error in mapping function {context.code}: {error}")
        else:
            self._logger.warning(f"{context.code}: {error}")

        return MappingResult(
            status=status,
            code=context.code,
            path=context.path,
            writes=list(context.written),
            skipped=list(context.skipped),
            message=str(error),
        )

    # --- Abstract Method (Converter-Specific Logic) ---

    @abstractmethod
    def _resolve_code(self, mapping_code: str) -> str:
        """
        Converter-specific validation of a mapping code.

        Args:
            mapping_code: The raw code given by the caller.

        Returns:
            The canonical code used as registry key.

        Raises:
            UnrecognizedMappingCodeError: If the code is not served.
        """
        pass
