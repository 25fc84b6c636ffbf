from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.core'
    verbose_name = 'Core'

    def ready(self):
        """Import signals when app is ready"""
        import backend.core.audit_signals  # noqa: F401  # Tracer updates
        import backend.core.cache_signals  # noqa: F401  # Cache invalidation signals
