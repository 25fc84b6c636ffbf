from django.apps import AppConfig


class QualityTrainingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.quality_training'
    verbose_name = 'Quality Training'
