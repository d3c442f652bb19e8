"""HTTP API package for Dopelist."""
