"""
FastAPI dependencies for the webhook listener.

The dispatcher (and the target table inside it) is created once in the app
lifespan and handed to endpoints through these functions, so tests can
swap them with `app.dependency_overrides`.
"""

from fastapi import Request

from deployhook.core.config import Settings, settings
from deployhook.core.dispatch import DeployDispatcher


def get_settings() -> Settings:
    return settings


def get_dispatcher(request: Request) -> DeployDispatcher:
    return request.app.state.dispatcher
