"""Tests for core utilities."""
