"""Advertising performance dashboard: ingestion, metrics and period comparisons."""

__version__ = "0.1.0"
