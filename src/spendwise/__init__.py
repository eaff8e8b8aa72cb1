"""SpendWise - personal expense tracking with heuristic spending insights."""

__version__ = "0.1.0"
