"""Utility functions for audit logging and request parsing"""
import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (order_status_change, stock_move, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_reference: Reference identifier (e.g., order id, stock key)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_reference=object_reference,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def parse_bool(value, default=True):
    """Lenient boolean parsing for form and query values"""
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return default
    v = value.strip().lower()
    if v in ('true', '1', 'on', 'yes'):
        return True
    if v in ('false', '0', 'off', 'no'):
        return False
    return default


def parse_limit(value, default, maximum):
    """Clamp a `limit` query value to [1, maximum]"""
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return min(max(limit, 1), maximum)


def clean_text(value):
    """Strip a free-text value; blank becomes None"""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def error_response(exc):
    """Render a domain error as a structured API response"""
    from rest_framework.response import Response
    return Response(exc.as_dict(), status=exc.status_code)
