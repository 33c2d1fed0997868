"""
Observability package for dashdeck.

Provides structured JSON logging with request and extension correlation IDs.
"""

from .logging import StructuredLogger, set_request_context, clear_request_context, generate_request_id

__all__ = [
    "StructuredLogger",
    "set_request_context",
    "clear_request_context",
    "generate_request_id",
]
