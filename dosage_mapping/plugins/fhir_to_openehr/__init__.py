"""FHIR to openEHR mapping functions for medication dosage and timing."""

from .codes import MappingCode
from .converter import FhirToOpenEhrConverter

__all__ = ["FhirToOpenEhrConverter", "MappingCode"]
