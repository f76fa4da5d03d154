"""Utility helpers shared across the walkerevo codebase."""
