"""Tests for gitversioning."""
