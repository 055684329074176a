"""Observatory - request-scoped aggregation of external situational feeds."""

__version__ = "0.1.0"
