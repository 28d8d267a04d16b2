"""Shared test data for the Flutter installer tests."""
