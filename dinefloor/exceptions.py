import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(APIException):
    """Base class for failures raised by the floor services."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Operation failed'
    default_code = 'domain_error'


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class InvalidState(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Operation not allowed in the current state'
    default_code = 'invalid_state'


class DomainValidation(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input'
    default_code = 'validation'


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Already exists'
    default_code = 'conflict'


def domain_exception_handler(exc, context):
    """Render domain errors as {'error': ..., 'code': ...}; everything else as DRF does."""
    response = exception_handler(exc, context)

    if response is not None and isinstance(exc, DomainError):
        logger.debug('%s rejected: %s', context['view'].__class__.__name__, exc.detail)
        response.data = {
            'error': str(exc.detail),
            'code': exc.default_code,
        }

    return response
