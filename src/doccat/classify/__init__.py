"""Keyword matching and topic selection."""
