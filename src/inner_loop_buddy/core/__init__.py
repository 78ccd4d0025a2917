"""Scopes, criteria matching, configuration aggregation and ports."""
