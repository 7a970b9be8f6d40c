"""Configuration and startup helpers."""
