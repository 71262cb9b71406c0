"""Configuration values and paths for jaskmoney."""
