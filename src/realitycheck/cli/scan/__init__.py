"""Scan commands."""
