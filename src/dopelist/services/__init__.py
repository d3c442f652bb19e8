# src/dopelist/services/__init__.py
"""Service layer for the Dopelist API."""
