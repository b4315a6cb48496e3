"""Shared utilities for ucilink."""

from ucilink.utils.logging import setup_logging

__all__ = ["setup_logging"]
