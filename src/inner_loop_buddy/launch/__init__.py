"""Availability probe, browser surface and launch controller."""
