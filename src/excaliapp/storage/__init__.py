"""Storage implementations for excaliapp."""

from .base import DrawingBackend
from .drawing_store import Drawing, DrawingStore, DrawingStoreError

__all__ = ['DrawingBackend', 'Drawing', 'DrawingStore', 'DrawingStoreError']
