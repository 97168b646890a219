"""
Mapping Exception Classes

Typed exceptions raised inside the mapping functions. The dispatcher converts
every one of them into a failed ``MappingResult``; none of them crosses the
``apply_fhir_to_openehr`` boundary.
"""


class MappingError(Exception):
    """Base exception for all mapping errors."""

    pass


class UnrecognizedMappingCodeError(MappingError):
    """Raised when a mapping code is not in the known set."""

    pass


class TypeMismatchError(MappingError):
    """Raised when the source value is not a shape the function accepts."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"Expected {expected} but got: {actual}")
        self.expected = expected
        self.actual = actual


class MissingFieldError(MappingError):
    """
    Raised when a required source field is absent.

    ``expected`` marks the "nothing to map" case (e.g. a timing without a
    duration), which is reported at INFO level rather than as a warning.
    """

    def __init__(self, message: str, field_name: str, expected: bool = False):
        super().__init__(message)
        self.field_name = field_name
        self.expected = expected


class InvalidUnitError(MappingError):
    """Raised when a unit is outside the valid set of a conversion."""

    def __init__(self, message: str, unit: object = None):
        super().__init__(message)
        self.unit = unit


class UnformattableValueError(MappingError):
    """Raised when a time or duration literal cannot be validated or formatted."""

    pass


class SourceValueError(MappingError):
    """Raised when raw input cannot be turned into a source value."""

    pass


class RequestLoadError(MappingError):
    """Raised when a mapping request document cannot be read or parsed."""

    pass
