"""
Audit signals
Write one TracerUpdate per column whenever an audited row is inserted,
updated or deleted. Stands down when AUDIT_MODE is 'database', where the
PostgreSQL triggers from `setup_audit_triggers` do the same work.
"""
import json
import logging
import threading
from contextlib import contextmanager
from datetime import date, datetime, time

from django.conf import settings
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver
from django.utils import timezone

from .audit import EXCLUDED_FIELDS, is_audited
from .models import TracerUpdate
from .utils import get_audit_user

logger = logging.getLogger(__name__)

_thread_locals = threading.local()


@contextmanager
def suspend_audit_signals():
    """
    Context manager to temporarily stop writing tracer updates.
    Used by maintenance commands that rewrite rows in bulk.
    """
    previous = is_suspended()
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = previous


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def signals_enabled(sender):
    if is_suspended():
        return False
    if getattr(settings, 'AUDIT_MODE', 'signals') == 'database':
        return False
    return is_audited(sender)


def serialize_value(value):
    """Text form of a column value as stored in tracer_updates"""
    if value is None:
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def audited_fields(model):
    return [f for f in model._meta.concrete_fields if f.attname not in EXCLUDED_FIELDS]


def snapshot(instance):
    return {
        field.attname: serialize_value(getattr(instance, field.attname))
        for field in audited_fields(type(instance))
    }


def _write(sender, instance, action, rows):
    if not rows:
        return
    changed_at = timezone.now()
    changed_by = get_audit_user()
    source_key = str(instance.pk)
    TracerUpdate.objects.bulk_create([
        TracerUpdate(
            source_table=sender._meta.db_table,
            source_key=source_key,
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            action_type=action,
            changed_at=changed_at,
            changed_by=changed_by,
        )
        for field_name, old_value, new_value in rows
    ])
    logger.debug(f"Traced {action} on {sender._meta.db_table}:{source_key} ({len(rows)} fields)")


@receiver(pre_save)
def capture_previous_values(sender, instance, raw=False, **kwargs):
    if raw or not signals_enabled(sender):
        return
    instance._audit_previous = None
    if instance._state.adding or instance.pk is None:
        return
    previous = sender._default_manager.filter(pk=instance.pk).first()
    if previous is not None:
        instance._audit_previous = snapshot(previous)


@receiver(post_save)
def trace_save(sender, instance, created, raw=False, **kwargs):
    if raw or not signals_enabled(sender):
        return
    current = snapshot(instance)
    previous = getattr(instance, '_audit_previous', None)

    if created or previous is None:
        rows = [(name, None, value) for name, value in current.items() if value is not None]
        _write(sender, instance, TracerUpdate.ACTION_INSERT, rows)
        return

    rows = [
        (name, previous.get(name), value)
        for name, value in current.items()
        if previous.get(name) != value
    ]
    _write(sender, instance, TracerUpdate.ACTION_UPDATE, rows)
    instance._audit_previous = current


@receiver(post_delete)
def trace_delete(sender, instance, **kwargs):
    if not signals_enabled(sender):
        return
    rows = [(name, value, None) for name, value in snapshot(instance).items() if value is not None]
    _write(sender, instance, TracerUpdate.ACTION_DELETE, rows)
