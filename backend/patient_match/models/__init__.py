"""Pydantic models for submitted patients and validation results."""
