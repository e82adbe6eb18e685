"""Data types and conversion helpers."""
