"""Regulium: LLM-assisted regulatory compliance checks for product features."""

__version__ = "0.1.0"
