"""Errors raised by the assignment, replication and reassignment services.

They subclass DRF's ``APIException`` so a view can let them propagate and the
framework renders the status code and message.
"""
from __future__ import annotations

from contextlib import contextmanager

from django.db import DatabaseError
from rest_framework import exceptions, status


class NotFound(exceptions.NotFound):
    pass


class ServiceError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error."
    default_code = "internal_server_error"


class PersistenceError(ServiceError):
    """A store operation failed; carries the operation that was attempted."""

    def __init__(self, operation: str, exc: Exception):
        self.operation = operation
        super().__init__(f"Error in {operation}: {exc}")


class RemapError(ServiceError):
    default_code = "remap_error"


class IdentityProviderError(Exception):
    """User lookup, invitation or profile update failed."""


@contextmanager
def persistence_errors(operation: str):
    try:
        yield
    except DatabaseError as exc:
        raise PersistenceError(operation, exc) from exc
