"""Shared helpers (I/O, time) used across Reality Check core."""
