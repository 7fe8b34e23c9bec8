"""Core selection logic."""
