"""Configuration and logging setup."""
