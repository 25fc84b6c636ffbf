"""Transaction, retry and payload helpers shared by every app"""
import contextvars
import json
import logging
import time
from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError, connection, transaction

logger = logging.getLogger(__name__)

RETRYABLE_ERROR_MARKERS = ('prepared statement', 'already exists')
STATEMENT_TIMEOUT = '20s'

_audit_user = contextvars.ContextVar('audit_user', default=None)


def get_audit_user():
    """Id of the user tagged on the current transaction, if any"""
    return _audit_user.get()


def set_audit_user(user_id):
    """Tag the current context without opening a transaction. Returns the reset token."""
    return _audit_user.set(str(user_id) if user_id is not None else None)


def reset_audit_user(token):
    _audit_user.reset(token)


@contextmanager
def with_audit_user(user_id):
    """
    Run a block inside a transaction tagged with the acting user.

    The id is always kept in a context variable for the signal-based audit
    receivers. On PostgreSQL it is also written to the transaction-local
    ``app.user_id`` setting read by the audit triggers.
    """
    token = set_audit_user(user_id)
    try:
        with transaction.atomic():
            if connection.vendor == 'postgresql':
                with connection.cursor() as cursor:
                    cursor.execute(
                        "SELECT set_config('app.user_id', %s, true)",
                        [str(user_id) if user_id is not None else ''],
                    )
                    cursor.execute(f"SET LOCAL statement_timeout = '{STATEMENT_TIMEOUT}'")
            yield
    finally:
        reset_audit_user(token)


def is_retryable_error(exc):
    if isinstance(exc, IntegrityError):
        return False
    message = str(exc).lower()
    return any(marker in message for marker in RETRYABLE_ERROR_MARKERS)


def with_retry(fn, max_retries=3):
    """
    Call ``fn`` and retry it when the pooler rejects the connection state.

    Only database errors mentioning a stale prepared statement are retried,
    with a linear backoff of 0.5s per attempt. Everything else propagates on
    the first failure.
    """
    last_error = None
    for attempt in range(max_retries):
        try:
            return fn()
        except DatabaseError as e:
            if not is_retryable_error(e):
                raise
            last_error = e
            logger.warning(f"Retryable database error (attempt {attempt + 1}/{max_retries}): {e}")
            if attempt < max_retries - 1:
                time.sleep(0.5 * (attempt + 1))
    raise last_error


def run_audited(user_id, fn, max_retries=3):
    """``fn`` inside ``with_audit_user``, retried as a whole"""
    def attempt():
        with with_audit_user(user_id):
            return fn()
    return with_retry(attempt, max_retries=max_retries)


def normalize_empty_strings(value):
    """Trim strings and turn blank ones into None, recursing into lists and dicts"""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    if isinstance(value, list):
        return [normalize_empty_strings(item) for item in value]
    if isinstance(value, dict):
        return {key: normalize_empty_strings(item) for key, item in value.items()}
    return value


def clean_text(value):
    """Stripped string or None; non-string values count as missing"""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def parse_positive_int(value, default, maximum=None):
    """Query-string integer with a fallback for junk or non-positive values"""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    if maximum is not None:
        number = min(number, maximum)
    return number


def paginate(queryset, request, default_limit=10):
    """Slice a queryset by ``page``/``limit`` query params.

    Returns the page of objects plus the ``pagination`` block used by the
    list endpoints.
    """
    page = parse_positive_int(request.query_params.get('page'), 1)
    limit = parse_positive_int(request.query_params.get('limit'), default_limit, maximum=100)
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])
    pages = (total + limit - 1) // limit if total else 0
    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': pages,
    }


def get_user_label(user):
    """Email for created_by/updated_by columns, falling back to the name"""
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return getattr(user, 'email', None) or getattr(user, 'name', None)


def parse_json_field(value, default=None):
    """Decode a JSON string sent inside a multipart form"""
    if value is None or value == '':
        return default
    if isinstance(value, (list, dict)):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed JSON form field: {value!r:.80}")
        return default


def request_payload(request):
    """Request body as a plain dict with blank strings turned into None"""
    data = request.data
    if hasattr(data, 'dict'):
        data = data.dict()
    return normalize_empty_strings(dict(data))
