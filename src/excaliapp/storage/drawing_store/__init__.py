"""Drawing storage and management."""

from .errors import (
    DrawingDecodeError,
    DrawingEncodeError,
    DrawingIOError,
    DrawingNotFoundError,
    DrawingStoreError,
    InvalidDrawingIdError,
    StorageUnavailableError,
)
from .models import Drawing, StorageLocation
from .store import CONTENT_SUFFIX, METADATA_SUFFIX, DrawingStore

__all__ = [
    'Drawing',
    'StorageLocation',
    'DrawingStore',
    'METADATA_SUFFIX',
    'CONTENT_SUFFIX',
    'DrawingStoreError',
    'StorageUnavailableError',
    'DrawingNotFoundError',
    'DrawingDecodeError',
    'DrawingEncodeError',
    'DrawingIOError',
    'InvalidDrawingIdError',
]
