"""Guided tours API: tour authoring, purchases and location-driven tour execution."""

__version__ = "1.0.0"
