"""Incremental catalog aggregation pipeline for library and statistics pages."""

__version__ = "0.1.0"
