"""Service layer for Neighborhood Nature."""

from .nature_service import NatureService

__all__ = ["NatureService"]
