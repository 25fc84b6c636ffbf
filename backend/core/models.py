import uuid

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class DashboardModel(models.Model):
    """Base for every dashboard resource: UUID key plus timestamps.

    ``label_field`` names the attribute shown wherever a record is referred to
    by name (search results, tracer updates, notifications). ``parent_field``
    names the FK that leads one level up the resource hierarchy, and
    ``parent_info_key`` is the key a record contributes to notification
    ``parentInfo`` when it appears as someone's ancestor.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    label_field = 'name'
    parent_field = None
    parent_info_key = None

    class Meta:
        abstract = True

    @property
    def display_name(self):
        return getattr(self, self.label_field, None)

    def get_audit_parent(self):
        if not self.parent_field:
            return None
        return getattr(self, self.parent_field, None)

    def get_audit_ancestors(self):
        """Parents from the nearest up to the root of the hierarchy."""
        ancestors = []
        parent = self.get_audit_parent()
        while parent is not None:
            ancestors.append(parent)
            parent = parent.get_audit_parent() if hasattr(parent, 'get_audit_parent') else None
        return ancestors

    def __str__(self):
        return str(self.display_name or self.pk)


class AuthoredModel(DashboardModel):
    """Dashboard resource that records who created and last edited it"""
    created_by = models.CharField(max_length=255, null=True, blank=True)
    updated_by = models.CharField(max_length=255, null=True, blank=True)
    update_notes = models.TextField(null=True, blank=True)

    class Meta:
        abstract = True


class UserManager(BaseUserManager):
    """Users log in with their email address."""
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email address must be set')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('role', User.ROLE_ADMIN)
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('role', User.ROLE_SUPER_ADMIN)
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Dashboard operator. Agents are tracked separately in ``agents.Agent``."""
    ROLE_SUPER_ADMIN = 'SUPER_ADMIN'
    ROLE_ADMIN = 'ADMIN'
    ROLE_CHOICES = [
        (ROLE_SUPER_ADMIN, 'Super Admin'),
        (ROLE_ADMIN, 'Admin'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = None
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_ADMIN)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.name

    @property
    def is_super_admin(self):
        return self.role == self.ROLE_SUPER_ADMIN

    @property
    def is_admin_role(self):
        return self.role in (self.ROLE_SUPER_ADMIN, self.ROLE_ADMIN)


class TracerUpdate(models.Model):
    """One changed column of one audited row."""
    ACTION_INSERT = 'INSERT'
    ACTION_UPDATE = 'UPDATE'
    ACTION_DELETE = 'DELETE'
    ACTION_CHOICES = [
        (ACTION_INSERT, 'Insert'),
        (ACTION_UPDATE, 'Update'),
        (ACTION_DELETE, 'Delete'),
    ]

    source_table = models.CharField(max_length=100)
    source_key = models.CharField(max_length=100)
    field_name = models.CharField(max_length=100)
    old_value = models.TextField(null=True, blank=True)
    new_value = models.TextField(null=True, blank=True)
    action_type = models.CharField(max_length=10, choices=ACTION_CHOICES)
    changed_at = models.DateTimeField()
    changed_by = models.CharField(max_length=100, null=True, blank=True)

    class Meta:
        db_table = 'tracer_updates'
        ordering = ['-changed_at']
        indexes = [
            models.Index(fields=['source_table', 'source_key'], name='tracer_source_idx'),
            models.Index(fields=['-changed_at'], name='tracer_changed_at_idx'),
            models.Index(fields=['action_type'], name='tracer_action_idx'),
            models.Index(fields=['changed_by'], name='tracer_changed_by_idx'),
        ]

    def __str__(self):
        return f"{self.action_type} {self.source_table}:{self.source_key}.{self.field_name}"
