"""HTTP controller and request schemas."""

from .controller import NatureController

__all__ = ["NatureController"]
