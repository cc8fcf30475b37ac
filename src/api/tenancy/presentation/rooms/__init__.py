"""Room registry routes and models."""

from tenancy.presentation.rooms.routes import router

__all__ = ["router"]
