"""Domain errors raised by the service layer and the API exception handler"""
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class NotFound(APIException):
    """A referenced record does not exist or has been soft-deleted"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class InvalidArgument(APIException):
    """Malformed input or a violated business rule"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid argument.'
    default_code = 'invalid_argument'


class IllegalState(APIException):
    """The operation is not allowed in the record's current state"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Operation not allowed in the current state.'
    default_code = 'illegal_state'


class StorageFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'A storage error occurred.'
    default_code = 'storage_failure'


DOMAIN_ERRORS = (NotFound, InvalidArgument, IllegalState, StorageFailure)


def api_exception_handler(exc, context):
    """
    Wrap DRF's handler: domain errors become {'error', 'message'} bodies and
    database errors surface as StorageFailure.
    """
    if isinstance(exc, DatabaseError):
        request = context.get('request')
        path = request.path if request is not None else '-'
        logger.error(f"Storage failure on {path}: {str(exc)}")
        exc = StorageFailure()

    response = exception_handler(exc, context)
    if response is not None and isinstance(exc, DOMAIN_ERRORS):
        response.data = {
            'error': exc.default_code,
            'message': str(exc.detail),
        }
    return response
