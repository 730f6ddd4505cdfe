"""HTTP surface for the content service."""

from .main import create_app

__all__ = ["create_app"]
