"""Core configuration, data models and record storage."""
