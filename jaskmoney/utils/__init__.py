"""Shared helpers for jaskmoney."""
