"""Application context passed explicitly to views."""

from src.gallery.context.app_context import AppContext

__all__ = ["AppContext"]
