"""Utility helpers for Pantry Tracker (configuration, constants, timestamps)."""
