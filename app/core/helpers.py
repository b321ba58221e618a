"""
Helper functions for common infrastructure operations.

This module provides domain-agnostic utility functions for:
- UUID validation
- HTTP request helpers (client IP extraction)

These utilities are pure infrastructure - they have no knowledge
of domain concepts like invoices, payments, or enrollments.

Usage:
    from core.helpers import get_client_ip, validate_uuid

    ip = get_client_ip(request)
    if validate_uuid(reference):
        ...
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from django.http import HttpRequest


def validate_uuid(value: str | None) -> bool:
    """
    Check if string is a valid UUID.

    Args:
        value: String to validate

    Returns:
        True if valid UUID format

    Example:
        is_valid = validate_uuid("550e8400-e29b-41d4-a716-446655440000")  # True
    """
    try:
        uuid.UUID(str(value))
        return True
    except (ValueError, TypeError):
        return False


def get_client_ip(request: HttpRequest) -> str:
    """
    Extract client IP from request, handling proxies.

    Checks X-Forwarded-For header for proxy chains.

    Args:
        request: Django HTTP request

    Returns:
        Client IP address string

    Example:
        ip = get_client_ip(request)
    """
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        # Take the first IP in the chain (original client)
        ip = x_forwarded_for.split(",")[0].strip()
    else:
        ip = request.META.get("REMOTE_ADDR", "")
    return ip
