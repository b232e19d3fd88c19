"""Utility modules for gitversioning."""
