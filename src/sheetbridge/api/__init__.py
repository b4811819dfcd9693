"""HTTP API for SheetBridge."""

from .app import create_app

__all__ = ["create_app"]
