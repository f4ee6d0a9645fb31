"""Naming and canonical JSON helpers."""
