"""Utility functions for audit logging and list pagination"""
import logging
from datetime import datetime, time

from django.conf import settings
from django.core.paginator import Paginator
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

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
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (order_create, payment_add, refund, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., order number)
        object_reference: Reference identifier (e.g., order number, production order id)

    The insert runs in its own savepoint so a failed audit write never
    breaks the surrounding transaction.
    """
    audit_user = None
    if user:
        audit_user = user
    elif request and hasattr(request, 'user'):
        audit_user = request.user

    ip_address = get_client_ip(request) if request else None

    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                user=audit_user if audit_user and audit_user.is_authenticated else None,
                action=action,
                model_name=model_name,
                object_id=str(object_id),
                object_name=object_name,
                object_reference=object_reference,
                changes=changes or {},
                ip_address=ip_address
            )
    except DatabaseError as e:
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def get_page_params(request):
    """Read 1-based `page` and `size` (or `limit`) query params, clamped to sane bounds"""
    try:
        page = int(request.query_params.get('page', 1))
    except (TypeError, ValueError):
        page = 1
    size = request.query_params.get('size') or request.query_params.get('limit')
    try:
        size = int(size) if size else settings.DEFAULT_PAGE_SIZE
    except (TypeError, ValueError):
        size = settings.DEFAULT_PAGE_SIZE
    return max(page, 1), min(max(size, 1), settings.MAX_PAGE_SIZE)


def paginated_response_data(request, queryset, serializer_class):
    """Paginate a queryset and build the standard list payload"""
    page, size = get_page_params(request)
    paginator = Paginator(queryset, size)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True)
    return {
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': size,
        'total_pages': paginator.num_pages,
    }


def normalize_choice(value, choices, label='value'):
    """Map a case-insensitive input onto one of the stored lowercase choice values"""
    from .exceptions import InvalidArgument

    valid_values = [choice[0] for choice in choices]
    normalized = str(value).strip().lower() if value is not None else ''
    if normalized not in valid_values:
        raise InvalidArgument(f'{label} must be one of: {", ".join(valid_values)}')
    return normalized


def parse_date_bound(value, end_of_day=False, label='date'):
    """
    Parse an ISO date or datetime filter bound into an aware datetime.

    A bare date covers the whole day: start of day for lower bounds,
    end of day for upper bounds, so ranges are inclusive.
    """
    from .exceptions import InvalidArgument

    value = (value or '').strip()
    try:
        parsed = parse_datetime(value)
        day = parse_date(value) if parsed is None else None
    except ValueError:
        parsed = day = None
    if parsed is None:
        if day is None:
            raise InvalidArgument(f'{label} must be an ISO date or datetime')
        parsed = datetime.combine(day, time.max if end_of_day else time.min)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed
