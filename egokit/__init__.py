"""Lifecycle management, rotating structured logging and small utilities for services."""

__version__ = "0.1.0"