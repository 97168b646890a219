from enum import Enum


class MappingCode(str, Enum):
    """Mapping function identifiers used in FHIR/openEHR mapping files."""

    DOSAGE_DURATION_TO_ADMINISTRATION_DURATION = (
        "dosageDurationToAdministrationDuration"
    )
    RATIO_TO_DV_QUANTITY = "ratio_to_dv_quantity"
    TIMING_TO_DAILY_NON_DAILY = "timingToDaily_NonDaily"
    DOSAGE_QUANTITY_TO_RANGE = "dosageQuantityToRange"
