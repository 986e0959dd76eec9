"""Logging helpers for applications embedding argformat."""

from argformat.observability.logging import JSONFormatter, configure_logging

__all__ = ["JSONFormatter", "configure_logging"]
