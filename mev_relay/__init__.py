"""Swap event model, DEX protocol detection, filtering, normalisation and in-memory storage."""

__version__ = "0.1.0"
__all__ = ["domain", "protocol", "filter", "normalizer", "parser", "repository"]