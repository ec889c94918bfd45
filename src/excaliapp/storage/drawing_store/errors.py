"""Drawing store exceptions."""

from pathlib import Path
from typing import Optional


class DrawingStoreError(Exception):
    """Base exception for drawing storage failures."""

    def __init__(
        self,
        message: str,
        drawing_id: Optional[str] = None,
        path: Optional[Path] = None
    ):
        super().__init__(message)
        self.drawing_id = drawing_id
        self.path = path


class StorageUnavailableError(DrawingStoreError):
    """Raised when the storage directory cannot be created or read."""


class DrawingNotFoundError(DrawingStoreError):
    """Raised when a drawing, or one half of its file pair, is missing."""


class DrawingDecodeError(DrawingStoreError):
    """Raised when a stored file exists but cannot be decoded."""


class DrawingIOError(DrawingStoreError):
    """Raised for read/write/remove failures not covered above."""


class InvalidDrawingIdError(DrawingStoreError, ValueError):
    """Raised when an id cannot be used as a file name stem."""


class DrawingEncodeError(DrawingStoreError, ValueError):
    """Raised when drawing content cannot be turned into bytes for storage."""
