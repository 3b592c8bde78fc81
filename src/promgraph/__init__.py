"""Dependency graphs for Prometheus recording and alerting rules."""

__version__ = "0.1.0"
