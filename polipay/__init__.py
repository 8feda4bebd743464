"""POLi Pay gateway integration service."""

__version__ = "0.1.0"
