"""Source (FHIR) and target (flat openEHR) data models."""
