"""Shared library helpers."""

from src.libs.resend_client import (
    ResendAPIError,
    ResendClient,
    ResendClientError,
    ResendEmailResponse,
)

__all__ = [
    "ResendAPIError",
    "ResendClient",
    "ResendClientError",
    "ResendEmailResponse",
]
