"""Mapping plugins."""
