"""HTTP surface for triggering and inspecting report runs."""

from .app import create_app

__all__ = ["create_app"]
