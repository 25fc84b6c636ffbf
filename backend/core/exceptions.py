"""API error rendering: every failure leaves the API as ``{"error": "..."}``"""
import logging

from django.core.exceptions import PermissionDenied, ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the object storage service rejects an upload."""


def error_response(message, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({'error': message}, status=status_code)


def first_error_message(detail):
    """Pull the first human readable message out of a DRF error detail"""
    if isinstance(detail, dict):
        if 'error' in detail:
            return first_error_message(detail['error'])
        if 'detail' in detail:
            return first_error_message(detail['detail'])
        for field, value in detail.items():
            message = first_error_message(value)
            if field == 'non_field_errors':
                return message
            return f"{field}: {message}"
        return 'Invalid request'
    if isinstance(detail, (list, tuple)):
        return first_error_message(detail[0]) if detail else 'Invalid request'
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(exc.messages)
    elif isinstance(exc, PermissionDenied):
        return error_response('Forbidden', status.HTTP_403_FORBIDDEN)
    elif isinstance(exc, Http404):
        return error_response(str(exc) or 'Not found', status.HTTP_404_NOT_FOUND)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}",
            exc_info=exc,
        )
        return error_response('Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)

    response.data = {'error': first_error_message(response.data)}
    return response
