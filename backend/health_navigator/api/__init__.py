"""API module."""

from .auth import router as auth_router
from .medications import router as medications_router
from .fitness import router as fitness_router
from .chat import router as chat_router

__all__ = ['auth_router', 'medications_router', 'fitness_router', 'chat_router']
