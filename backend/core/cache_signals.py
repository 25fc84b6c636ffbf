"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_agent_stats_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

AGENT_STATS_MODELS = ('agents.Agent', 'agents.Performance')


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk imports to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def invalidate_agent_stats_cache_manual():
    """Manually invalidate agent stats cache"""
    try:
        invalidate_agent_stats_cache()
    except Exception as e:
        logger.warning(f"Error invalidating agent stats cache: {e}")


@receiver([post_save, post_delete])
def invalidate_agent_stats(sender, instance, **kwargs):
    """Invalidate agent stats when agents or their performance rows change"""
    if is_suspended():
        return

    if sender._meta.label not in AGENT_STATS_MODELS:
        return

    # Invalidate after commit so a concurrent read cannot re-cache stale data
    transaction.on_commit(invalidate_agent_stats_cache_manual)
