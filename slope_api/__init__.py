"""Elevation sampling and slope analysis service."""
