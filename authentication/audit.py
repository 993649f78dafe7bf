"""
Helpers for writing ``AuditLog`` entries from views and services.

Audit writes never fail the request that triggered them: errors are logged and
the caller carries on.
"""

import logging

from django.db import DatabaseError

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Client IP, honouring the first hop of X-Forwarded-For behind proxies."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_audit_event(request, action, resource_type, resource_id, status, metadata=None, user=None):
    """
    Record an audit event.

    Args:
        request: HTTP request the event belongs to, or None for events raised
            outside a request (the request columns are then left blank)
        action: Action type (CREATE, UPDATE, RECONCILE, ...)
        resource_type: ORDER, SHIPMENT, ...
        resource_id: ID of the affected resource
        status: SUCCESS, FAILURE or BLOCKED
        metadata: Extra JSON-serialisable event data
        user: Acting user when there is no request
    """
    fields = {
        'action': action,
        'resource_type': resource_type,
        'resource_id': str(resource_id) if resource_id is not None else None,
        'status': status,
        'metadata': metadata or {},
        'user': user,
    }
    if request is not None:
        request_user = getattr(request, 'user', None)
        fields.update(
            user=request_user if request_user is not None and request_user.is_authenticated else user,
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
            request_path=request.path,
            request_method=request.method,
        )
        # The view's own event replaces the generic row AuditLoggingMiddleware
        # would write for this request.
        http_request = getattr(request, '_request', request)
        if hasattr(http_request, '_audit_log_data'):
            del http_request._audit_log_data

    try:
        return AuditLog.objects.create(**fields)
    except DatabaseError as e:
        logger.error(f"Could not write audit event {action} on {resource_type} {resource_id}: {e}")
        return None
