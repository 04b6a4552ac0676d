"""Data models for virtual nodes and operation reports."""
