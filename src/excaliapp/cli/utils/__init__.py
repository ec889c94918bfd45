"""Utility functions for the excaliapp CLI."""

from .formatting import (
    create_metadata_panel,
    format_file_size,
    format_timestamp,
    truncate_text,
)

__all__ = [
    'create_metadata_panel',
    'format_file_size',
    'format_timestamp',
    'truncate_text',
]
