"""
API error taxonomy for the bookstore API.

Errors reach clients through a single DRF exception handler so every failure
has the same shape: ``{"error": "<human readable message>"}``, with field
level details under ``fields`` for validation failures.

Taxonomy:
- Validation failures -> ``rest_framework.exceptions.ValidationError`` (400)
- Unknown order/shipment/product -> ``rest_framework.exceptions.NotFound`` (404)
- Missing identity -> ``NotAuthenticated`` (401), insufficient role or
  ownership -> ``PermissionDenied`` (403)
- Storage failures -> ``UpstreamPersistenceError`` (500, logged, no detail)
"""

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class UpstreamPersistenceError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'upstream_persistence_error'


class FulfillmentStepError(APIException):
    """
    A step of the multi-step fulfillment save failed.

    Steps that ran before the failure stay committed; ``committed`` lists them
    so the caller knows what to re-fetch.
    """

    default_detail = 'Fulfillment save failed'
    default_code = 'fulfillment_step_failed'

    def __init__(self, step, committed, cause):
        self.step = step
        self.committed = list(committed)
        self.cause = cause
        if isinstance(cause, APIException):
            self.status_code = cause.status_code
            message = first_error_message(cause.detail)
        else:
            self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            message = UpstreamPersistenceError.default_detail
        super().__init__(detail=f'{step.capitalize()} update failed: {message}')


def first_error_message(data):
    """Collapse DRF error detail (dict/list/str) into one readable message."""
    if isinstance(data, dict):
        if 'detail' in data:
            return first_error_message(data['detail'])
        for field, value in data.items():
            message = first_error_message(value)
            if field == 'non_field_errors':
                return message
            return f'{field}: {message}'
        return ''
    if isinstance(data, (list, tuple)):
        return first_error_message(data[0]) if data else ''
    return str(data)


def api_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception(
            f"Persistence failure in {view.__class__.__name__ if view else 'API view'}"
        )
        exc = UpstreamPersistenceError()

    response = exception_handler(exc, context)
    if response is None:
        return None

    payload = {'error': first_error_message(response.data)}
    if isinstance(exc, ValidationError) and isinstance(response.data, dict):
        payload['fields'] = response.data
    if isinstance(exc, FulfillmentStepError):
        payload['step'] = exc.step
        payload['committed'] = exc.committed
    response.data = payload
    return response
