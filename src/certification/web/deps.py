"""Shared dependencies for route handlers."""

from fastapi import Header, Request

from certification.core.platform import CertificationPlatform
from certification.store.state_repository import save_platform


def get_platform(request: Request) -> CertificationPlatform:
    """Platform instance bound to the application."""
    return request.app.state.platform


def get_caller(x_caller_address: str = Header(..., alias="X-Caller-Address")) -> str:
    """Address on whose behalf the request runs."""
    return x_caller_address


def persist(request: Request) -> None:
    """Save the platform state when the app was created with a data_dir."""
    data_dir = request.app.state.data_dir
    if data_dir is not None:
        save_platform(request.app.state.platform, data_dir)
