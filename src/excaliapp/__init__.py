"""excaliapp - local storage for drawings."""

from .storage.drawing_store import Drawing, DrawingStore

__version__ = "0.1.0"

__all__ = ['Drawing', 'DrawingStore', '__version__']
