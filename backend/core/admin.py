from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, TracerUpdate


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['email', 'name', 'role', 'is_active', 'created_at']
    list_filter = ['role', 'is_active', 'created_at']
    search_fields = ['email', 'name']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at', 'last_login']
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Profile', {'fields': ('name', 'role', 'is_active')}),
        ('Permissions', {'fields': ('is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Dates', {'fields': ('last_login', 'created_at', 'updated_at')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'name', 'role', 'password1', 'password2'),
        }),
    )


@admin.register(TracerUpdate)
class TracerUpdateAdmin(admin.ModelAdmin):
    list_display = ['source_table', 'source_key', 'field_name', 'action_type', 'changed_by', 'changed_at']
    list_filter = ['action_type', 'source_table', 'changed_at']
    search_fields = ['source_table', 'source_key', 'field_name', 'changed_by']
    ordering = ['-changed_at']
    readonly_fields = [
        'source_table', 'source_key', 'field_name', 'old_value', 'new_value',
        'action_type', 'changed_at', 'changed_by',
    ]
