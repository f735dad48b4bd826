from __future__ import annotations

from fastapi import Request

from app.settings import Settings, get_settings
from app.user_store import InMemoryUserStore


def get_settings_dep() -> Settings:
    """FastAPI dependency for settings.

    Delegates to app.settings.get_settings (canonical constructor).
    """
    return get_settings()


def get_user_store(request: Request) -> InMemoryUserStore:
    # One store per application instance, created in create_app().
    return request.app.state.user_store
