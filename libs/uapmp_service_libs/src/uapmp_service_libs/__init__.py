"""UAPMP Service Libraries - shared plumbing for UAPMP services."""

from .quart_app import UapmpApp

__all__ = ["UapmpApp"]
