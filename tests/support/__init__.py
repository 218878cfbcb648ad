"""Test doubles shared across suites."""
