"""Configuration, result and persistence models."""
