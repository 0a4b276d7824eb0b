# ==========================================
# apps/matches/admin.py
# ==========================================

from django.contrib import admin, messages
from django.utils.html import format_html
from .models import Match, MatchStatus, Participation
from .services import (
    complete_match,
    cancel_match,
    cancel_participation,
    MatchesServiceError,
)


class ParticipationInline(admin.TabularInline):
    """
    Read-only roster of a match.

    Status and paid flags change through the services so capacity is checked
    and paid fees are refunded.
    """
    model = Participation
    fk_name = 'match'
    extra = 0
    can_delete = False
    fields = ['user', 'status', 'paid', 'invited_by', 'created_at']
    readonly_fields = ['user', 'status', 'paid', 'invited_by', 'created_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    """
    Admin interface for matches.

    Shows occupancy at a glance. Status is read-only; completing and
    cancelling run as actions through the match service, so cancelling
    refunds every paid fee.
    """

    list_display = [
        'title',
        'date',
        'location',
        'occupancy',
        'price_per_player',
        'status_badge',
        'created_by',
    ]

    list_filter = [
        'status',
        'is_recurring',
        'date',
    ]

    search_fields = [
        'title',
        'location',
        'created_by__display_name',
    ]

    readonly_fields = ['status', 'created_at', 'updated_at']
    inlines = [ParticipationInline]
    date_hierarchy = 'date'
    ordering = ['-date']

    fieldsets = (
        ('Match', {
            'fields': ('title', 'description', 'date', 'location', 'created_by')
        }),
        ('Roster & Price', {
            'fields': ('max_players', 'price_per_player', 'status')
        }),
        ('Recurrence', {
            'fields': ('is_recurring', 'recurring_day'),
            'classes': ('collapse',),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    actions = ['complete_selected', 'cancel_selected']

    def occupancy(self, obj):
        return f"{obj.confirmed_count()} / {obj.max_players}"
    occupancy.short_description = 'Confirmed'

    def status_badge(self, obj):
        colors = {
            MatchStatus.UPCOMING: ('#2D9CDB', 'white'),
            MatchStatus.COMPLETED: ('#27AE60', 'white'),
            MatchStatus.CANCELLED: ('#828282', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    @admin.action(description='Mark selected matches as completed')
    def complete_selected(self, request, queryset):
        count = 0
        for match in queryset.filter(status=MatchStatus.UPCOMING):
            try:
                complete_match(match_id=match.id, user=request.user)
                count += 1
            except MatchesServiceError as e:
                self.message_user(request, f'{match.title}: {e}', level=messages.WARNING)
        self.message_user(request, f'Completed {count} match(es).')

    @admin.action(description='Cancel selected matches and refund paid fees')
    def cancel_selected(self, request, queryset):
        count = 0
        for match in queryset.filter(status=MatchStatus.UPCOMING):
            try:
                cancel_match(match_id=match.id, user=request.user)
                count += 1
            except MatchesServiceError as e:
                self.message_user(request, f'{match.title}: {e}', level=messages.WARNING)
        self.message_user(request, f'Cancelled {count} match(es).')

    def get_actions(self, request):
        # Bulk delete skips the paid-participant check below
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.participations.filter(paid=True).exists():
            return False
        return super().has_delete_permission(request, obj)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('created_by')


@admin.register(Participation)
class ParticipationAdmin(admin.ModelAdmin):
    """Roster entries. Removal goes through the participation service."""

    list_display = ['match', 'user', 'status', 'paid', 'updated_at']
    list_filter = ['status', 'paid']
    search_fields = ['match__title', 'user__email', 'user__display_name']
    readonly_fields = ['match', 'user', 'status', 'paid', 'invited_by', 'created_at', 'updated_at']

    actions = ['remove_selected']

    @admin.action(description='Remove selected players (refunds paid fees)')
    def remove_selected(self, request, queryset):
        count = 0
        for participation in queryset.select_related('match', 'user'):
            try:
                cancel_participation(
                    match_id=participation.match_id,
                    user=participation.user,
                    cancelled_by=request.user,
                )
                count += 1
            except MatchesServiceError as e:
                self.message_user(
                    request,
                    f'{participation.user.get_display_name()}: {e}',
                    level=messages.WARNING,
                )
        self.message_user(request, f'Removed {count} player(s).')

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.paid:
            return False
        return super().has_delete_permission(request, obj)
