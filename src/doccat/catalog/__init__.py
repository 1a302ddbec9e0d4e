"""Catalog loading and wire encoding."""
