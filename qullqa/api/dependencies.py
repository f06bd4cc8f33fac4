"""API dependencies."""

from fastapi import Request

from qullqa.config import Settings
from qullqa.services.repository import ArtifactRepository


def get_repository(request: Request) -> ArtifactRepository:
    """Get the repository owned by the running application."""
    return request.app.state.repository


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings
