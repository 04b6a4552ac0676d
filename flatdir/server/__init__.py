"""Signed content server."""
