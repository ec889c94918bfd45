"""CLI package for excaliapp."""

from .app import app

__all__ = ['app']
