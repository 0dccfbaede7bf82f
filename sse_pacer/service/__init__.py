"""Service-layer entry points (developer CLI)."""
