"""
FastAPI dependencies.
"""

from .auth import Auth, get_auth_service

__all__ = ["Auth", "get_auth_service"]
