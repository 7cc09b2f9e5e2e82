"""Dependency injection helpers for API routes."""

from fastapi import Request

from formulary_service.services.formulary import FormularyService


def get_formulary_service(request: Request) -> FormularyService:
    """Get the FormularyService attached to the running app."""
    return request.app.state.formulary
