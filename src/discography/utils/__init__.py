"""Utility helpers for the discography pipeline."""

from .formatting import format_file_size
from .logging import setup_logging

__all__ = ['format_file_size', 'setup_logging']
