"""Core contracts, dispatcher base and error taxonomy."""
