import logging

from django.db import DatabaseError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from shared.exceptions import InternalError, ServiceError

logger = logging.getLogger(__name__)


def _operation_name(context):
    view = context.get('view')
    if view is None:
        return 'unknown'
    # Function views decorated with @api_view expose the wrapped name here
    return getattr(view, 'get_view_name', lambda: view.__class__.__name__)()


def custom_exception_handler(exc, context):
    """
    Custom exception handler for API responses.

    Maps the core's error taxonomy onto HTTP statuses. The body always carries
    the machine-readable code and the human-readable message; no business
    logic happens here.
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DatabaseError):
        exc = InternalError(reference=type(exc).__name__)

    if not isinstance(exc, ServiceError):
        return None

    request = context.get('request')
    user = getattr(request, 'user', None)
    subscriber_id = exc.subscriber_id or getattr(user, 'id', None)
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{_operation_name(context)} failed: code={exc.code} subscriber={subscriber_id} "
        f"reference={exc.reference} message={exc.message}"
    )
    set_rollback()
    return Response(exc.as_dict(), status=exc.status_code)
