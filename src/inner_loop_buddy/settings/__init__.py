"""Layered JSON settings (user -> workspace -> folder)."""
