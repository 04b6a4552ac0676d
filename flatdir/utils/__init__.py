"""Utilities for paths and signed URLs."""
