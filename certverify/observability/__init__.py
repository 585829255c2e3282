"""Logging and metrics wiring."""
