"""Game domain services: ranking, dealing, session storage and the engine.

This package contains pure(ish) domain logic that is imported by HTTP
routes, socket handlers and CLI commands, keeping transport concerns
separated from core game mechanics.
"""

from .engine import GameEngine

__all__ = ['GameEngine']
