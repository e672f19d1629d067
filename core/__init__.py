"""
Core module for FixFlow.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- ai_client: AI capability interfaces and the OpenAI-backed client

ai_client is imported from its module directly (it depends on models,
which depend on exceptions).
"""

from .exceptions import (
    FixFlowError,
    ValidationError,
    NotFoundError,
    ExternalServiceError,
)

__all__ = [
    "FixFlowError",
    "ValidationError",
    "NotFoundError",
    "ExternalServiceError",
]
