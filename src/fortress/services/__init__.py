"""Service layer for the Space Fortress rules engine."""

from fortress.services.session import GameSession

__all__ = ["GameSession"]
