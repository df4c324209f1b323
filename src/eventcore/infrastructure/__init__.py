"""Concrete adapters for the eventcore ports."""
