"""Dopelist: paid, time-boxed classified listings."""
