"""Aggregate spending summaries and listing helpers."""
