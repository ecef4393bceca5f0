"""Evaluation aggregation and round advancement for candidate recruitment."""

__version__ = "0.1.0"
