"""Tests - Test suite and test helpers."""
