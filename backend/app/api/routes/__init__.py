"""API routes."""

from app.api.routes import contractors, projects, roadmaps

__all__ = ["contractors", "projects", "roadmaps"]
