"""Shri Hanumant Library membership service."""
