"""Spec Factory: free-text product description to multi-artifact design packet."""

__version__ = "1.0.0"
