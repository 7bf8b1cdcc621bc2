"""Events API: HTTP service for managing event records stored in MongoDB."""

__version__ = "1.0.0"
