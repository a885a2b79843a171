"""Request-level game operations for both modes."""

from .maze import VectorMazeService
from .survival import SurvivalService

__all__ = ["VectorMazeService", "SurvivalService"]
