"""Adapters for external boundaries."""
