"""Validation of translated strings."""

from .placeholder_validator import PlaceholderIssue, PlaceholderValidator

__all__ = ["PlaceholderIssue", "PlaceholderValidator"]
