"""CLI output formatting utilities."""

import datetime
from typing import Any, Dict, List, Optional

from rich.markup import escape
from rich.panel import Panel


def format_file_size(size_bytes: int) -> str:
    """Format file size to a human-readable string."""
    if size_bytes >= 1_000_000_000:
        return f"{size_bytes / 1_000_000_000:.1f} GB"
    elif size_bytes >= 1_000_000:
        return f"{size_bytes / 1_000_000:.1f} MB"
    elif size_bytes >= 1_000:
        return f"{size_bytes / 1_000:.1f} KB"
    else:
        return f"{size_bytes} bytes"


def format_timestamp(timestamp: Optional[datetime.datetime]) -> str:
    """Format a stored timestamp in local time."""
    if timestamp is None:
        return "-"
    return timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to a maximum length."""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def create_metadata_panel(
    metadata: Dict[str, Any],
    title: str = "Metadata",
    exclude_keys: Optional[List[str]] = None
) -> Panel:
    """Create a panel displaying metadata."""
    exclude_keys = exclude_keys or []

    lines = []
    for key, value in metadata.items():
        if key in exclude_keys or value is None:
            continue

        if isinstance(value, datetime.datetime):
            value = format_timestamp(value)
        elif isinstance(value, bool):
            value = "yes" if value else "no"

        lines.append(f"{key}: {escape(str(value))}")

    content = "\n".join(lines) if lines else "No metadata available"
    return Panel(content, title=escape(title))
