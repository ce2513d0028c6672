"""Multi-floor parking lot allocator with ticketing and billing."""

__version__ = "1.0.0"
