"""Utility helpers for depassembly."""
