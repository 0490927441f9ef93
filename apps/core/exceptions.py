# apps/core/exceptions.py
"""
Domain errors raised by the service layer, and the single DRF hook that
turns them into HTTP responses.

Services never build responses themselves; API views let these propagate
and `api_exception_handler` (wired as REST_FRAMEWORK["EXCEPTION_HANDLER"])
maps them:

    ValidationError    -> 400
    AuthorizationError -> 403 (also audited as `authz.denied`)
    NotFoundError      -> 404
    DependencyError    -> 502
"""
from __future__ import annotations

import logging
from typing import Optional

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def as_payload(self) -> dict:
        payload = {"detail": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationError(DomainError):
    """Missing/blank required field, malformed value, unknown reference."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input."


class AuthorizationError(DomainError):
    """Actor is outside the role/ownership scope of the operation."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action."


class NotFoundError(DomainError):
    """Target does not exist, or is not visible to the actor (same answer)."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class DependencyError(DomainError):
    """A downstream collaborator (mail, broker) failed."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "A downstream service failed."


def api_exception_handler(exc, context):
    if not isinstance(exc, DomainError):
        return exception_handler(exc, context)

    request = context.get("request")
    if isinstance(exc, AuthorizationError) and request is not None:
        # imported lazily: audit models need the app registry
        from apps.audit.utils import log_event

        view = context.get("view")
        log_event(
            request,
            "authz.denied",
            getattr(view, "audit_object_type", ""),
            (context.get("kwargs") or {}).get("pk"),
        )
    elif isinstance(exc, DependencyError):
        logger.error("dependency failure surfaced to the API: %s", exc, exc_info=exc)
    return Response(exc.as_payload(), status=exc.status_code)
