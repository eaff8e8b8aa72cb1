"""Data export."""
