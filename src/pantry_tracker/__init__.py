"""Pantry Tracker - household and shop inventory with purchase price history."""

__version__ = "0.1.0"
