"""Adapters for storage and upstream identity providers."""
