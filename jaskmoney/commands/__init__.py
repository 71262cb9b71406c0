"""CLI command modules for jaskmoney."""
