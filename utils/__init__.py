"""Algorithms and helpers used by the services."""
