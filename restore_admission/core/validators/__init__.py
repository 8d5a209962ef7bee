"""Restore validators — one module per rule family."""
