"""FHIR medication dosage and timing to flat openEHR mapping functions."""

__version__ = "0.1.0"
