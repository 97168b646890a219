"""Mapping functions registered by the FHIR to openEHR converter."""

from .administration_duration import AdministrationDurationMapper
from .base import FhirMappingFunction
from .dose_range import DoseQuantityToRangeMapper
from .ratio_quantity import RatioToDvQuantityMapper
from .timing_daily import TimingToDailyNonDailyMapper

__all__ = [
    "AdministrationDurationMapper",
    "DoseQuantityToRangeMapper",
    "FhirMappingFunction",
    "RatioToDvQuantityMapper",
    "TimingToDailyNonDailyMapper",
]
