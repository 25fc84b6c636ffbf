from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from django.utils import timezone

from backend.core.models import DashboardModel


class Agent(DashboardModel):
    """Customer service agent whose scores are tracked. Not a dashboard login."""
    CATEGORY_SOCIAL_MEDIA = 'socialMedia'
    CATEGORY_ECOMMERCE = 'eCommerce'
    CATEGORY_CHOICES = [
        (CATEGORY_SOCIAL_MEDIA, 'Social Media'),
        (CATEGORY_ECOMMERCE, 'eCommerce'),
    ]

    name = models.CharField(max_length=255, db_index=True)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=CATEGORY_SOCIAL_MEDIA)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'agents'
        ordering = ['-created_at']
        verbose_name = 'Agent'

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return check_password(raw_password, self.password)

    @staticmethod
    def normalize_category(value):
        """``eCommerce`` for either spelling, ``socialMedia`` for anything else"""
        if value in ('eCommerce', 'ecommerce'):
            return Agent.CATEGORY_ECOMMERCE
        return Agent.CATEGORY_SOCIAL_MEDIA


class Performance(DashboardModel):
    """Monthly score card of an agent"""
    SCORE_FIELDS = ('qa_score', 'quiz_score', 'typing_test_score', 'afrt', 'art', 'rt', 'rr', 'csat')

    agent = models.ForeignKey(Agent, on_delete=models.CASCADE, related_name='performances')
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    qa_score = models.FloatField(default=0)
    qa_score_remarks = models.TextField(null=True, blank=True)
    quiz_score = models.FloatField(default=0)
    quiz_score_remarks = models.TextField(null=True, blank=True)
    typing_test_score = models.FloatField(default=0)
    typing_test_score_remarks = models.TextField(null=True, blank=True)
    afrt = models.FloatField(default=0)
    afrt_remarks = models.TextField(null=True, blank=True)
    art = models.FloatField(default=0)
    art_remarks = models.TextField(null=True, blank=True)
    rt = models.FloatField(default=0)
    rt_remarks = models.TextField(null=True, blank=True)
    rr = models.FloatField(default=0)
    rr_remarks = models.TextField(null=True, blank=True)
    csat = models.FloatField(default=0)
    csat_remarks = models.TextField(null=True, blank=True)

    parent_field = 'agent'

    class Meta:
        db_table = 'performances'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['agent', '-timestamp'], name='performance_agent_ts_idx'),
        ]

    def __str__(self):
        return f"{self.agent.name} @ {self.timestamp:%Y-%m}"
