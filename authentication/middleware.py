"""
Security middleware for the bookstore API.

This module provides middleware for:
- Audit logging of every mutating API request
- Security header injection
"""

import logging

from django.db import DatabaseError
from django.utils.deprecation import MiddlewareMixin

from .audit import get_client_ip
from .models import AuditLog

logger = logging.getLogger(__name__)


class AuditLoggingMiddleware(MiddlewareMixin):
    """
    Record one ``AuditLog`` row per mutating API request.

    The row is completed in ``process_response`` once the outcome is known:
    2xx is SUCCESS, 403 is BLOCKED, anything else FAILURE. Requests whose view
    already recorded a domain event through ``log_audit_event`` get no extra
    row. Logging failures never affect request processing.
    """

    LOGGED_METHODS = ['POST', 'PUT', 'PATCH', 'DELETE']

    EXCLUDED_PATHS = [
        '/api/auth/token/refresh/',
        '/static/',
    ]

    RESOURCE_TYPES = [
        ('/api/auth/', 'USER'),
        ('/api/orders/', 'ORDER'),
        ('/api/shipments/', 'SHIPMENT'),
        ('/api/products/', 'PRODUCT'),
        ('/admin/', 'ADMIN'),
    ]

    def process_request(self, request):
        if any(request.path.startswith(path) for path in self.EXCLUDED_PATHS):
            return None

        if request.path.startswith('/api/') and request.method in self.LOGGED_METHODS:
            request._audit_log_data = {
                'action': self._determine_action(request),
                'resource_type': self._determine_resource_type(request.path),
                'ip_address': get_client_ip(request),
                'user_agent': request.META.get('HTTP_USER_AGENT', ''),
                'request_path': request.path,
                'request_method': request.method,
            }
        return None

    def process_response(self, request, response):
        audit_data = getattr(request, '_audit_log_data', None)
        if audit_data is None:
            return response

        if 200 <= response.status_code < 300:
            status = 'SUCCESS'
        elif response.status_code == 403:
            status = 'BLOCKED'
        else:
            status = 'FAILURE'

        resource_id = None
        data = getattr(response, 'data', None)
        if isinstance(data, dict):
            resource_id = data.get('id')

        # DRF copies the authenticated user (JWT included) back onto the request.
        user = getattr(request, 'user', None)
        try:
            AuditLog.objects.create(
                user=user if user is not None and user.is_authenticated else None,
                resource_id=str(resource_id) if resource_id is not None else None,
                status=status,
                metadata={'status_code': response.status_code},
                **audit_data,
            )
        except DatabaseError as e:
            logger.error(f"Error completing audit log: {e}")

        return response

    def process_exception(self, request, exception):
        audit_data = getattr(request, '_audit_log_data', None)
        if audit_data is None:
            return None

        logger.error(
            f"Unhandled {type(exception).__name__} on {request.method} {request.path}: {exception}"
        )
        try:
            AuditLog.objects.create(
                status='FAILURE',
                metadata={
                    'exception_type': type(exception).__name__,
                },
                **audit_data,
            )
        except DatabaseError as e:
            logger.error(f"Error logging exception: {e}")
        # Already recorded; keep process_response from writing a second row.
        del request._audit_log_data
        return None

    def _determine_action(self, request):
        method = request.method
        path = request.path.lower()

        if method == 'POST':
            if 'login' in path:
                return 'LOGIN'
            if 'register' in path:
                return 'REGISTER'
            if 'fulfillment' in path:
                return 'FULFILLMENT_SAVE'
            return 'CREATE'
        if method in ('PUT', 'PATCH'):
            return 'UPDATE'
        if method == 'DELETE':
            return 'DELETE'
        return 'UNKNOWN'

    def _determine_resource_type(self, path):
        for prefix, resource_type in self.RESOURCE_TYPES:
            if path.startswith(prefix):
                return resource_type
        return 'UNKNOWN'


class SecurityHeadersMiddleware(MiddlewareMixin):
    """
    Add hardening headers to every response.

    Some of these are also covered by Django settings; setting them here keeps
    them present even when settings are misconfigured.
    """

    def process_response(self, request, response):
        response['X-Content-Type-Options'] = 'nosniff'
        response['X-Frame-Options'] = 'DENY'
        response['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        if request.path.startswith('/api/'):
            # JSON responses never load sub-resources.
            response['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
        response['Permissions-Policy'] = (
            "camera=(), geolocation=(), microphone=(), payment=(), usb=()"
        )
        return response
