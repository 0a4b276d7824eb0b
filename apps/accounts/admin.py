# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, UserRole


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for player profiles.

    Credits are read-only here: balances only move through the ledger
    services so every change has a matching transaction record.
    """

    list_display = [
        'email',
        'display_name',
        'phone',
        'role_badge',
        'credits_display',
        'is_active',
        'created_at',
    ]

    list_filter = [
        'role',
        'is_active',
        'is_staff',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
        'phone',
    ]

    ordering = ['display_name']

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'phone', 'photo_url', 'password')
        }),
        ('Balance', {
            'fields': ('credits',),
        }),
        ('Permissions', {
            'fields': ('role', 'is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'last_login', 'deleted_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
        ('Permissions', {
            'fields': ('role', 'is_active', 'is_staff', 'is_superuser'),
        }),
    )

    readonly_fields = [
        'credits',
        'created_at',
        'updated_at',
        'last_login',
        'deleted_at',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def role_badge(self, obj):
        """Display role as colored badge."""
        if obj.role == UserRole.ADMIN:
            bg, fg = '#00C853', 'white'
        else:
            bg, fg = '#ccc', '#333'
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_role_display()
        )
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'

    def credits_display(self, obj):
        """Show balance in red when the player is in debt."""
        color = '#B85C5C' if obj.credits < 0 else '#2E7D32'
        return format_html('<span style="color: {};">R$ {}</span>', color, obj.credits)
    credits_display.short_description = 'Credits'
    credits_display.admin_order_field = 'credits'

    actions = ['promote_to_admin', 'demote_to_player']

    @admin.action(description='Promote selected users to admin')
    def promote_to_admin(self, request, queryset):
        count = queryset.update(role=UserRole.ADMIN)
        self.message_user(request, f'Promoted {count} user(s).')

    @admin.action(description='Demote selected users to player')
    def demote_to_player(self, request, queryset):
        """Demote users (excludes superusers)."""
        safe_queryset = queryset.filter(is_superuser=False)
        count = safe_queryset.update(role=UserRole.PLAYER)
        self.message_user(request, f'Demoted {count} user(s).')
