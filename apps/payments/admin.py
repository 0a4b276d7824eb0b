# ==========================================
# apps/payments/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Payment, PaymentStatus, CreditTransaction, TransactionType
from .services import validate_payment, reject_payment, PaymentAlreadyProcessedError


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Admin interface for payments.

    Validation goes through the ledger service so the player's balance and
    the credit history stay in step; status is read-only in the form.
    """

    list_display = [
        'user',
        'amount',
        'status_badge',
        'match',
        'entered_by_admin',
        'validated_by',
        'created_at',
    ]

    list_filter = [
        'status',
        'entered_by_admin',
        'created_at',
    ]

    search_fields = [
        'user__email',
        'user__display_name',
        'description',
    ]

    readonly_fields = [
        'status',
        'vision_analysis',
        'validated_at',
        'validated_by',
        'created_at',
        'updated_at',
    ]

    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def status_badge(self, obj):
        """Display payment status as colored badge."""
        colors = {
            PaymentStatus.PENDING: ('#F2C94C', '#333'),
            PaymentStatus.VALIDATED: ('#27AE60', 'white'),
            PaymentStatus.REJECTED: ('#EB5757', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    actions = ['validate_selected', 'reject_selected']

    @admin.action(description='Validate selected payments')
    def validate_selected(self, request, queryset):
        count = 0
        for payment in queryset.filter(status=PaymentStatus.PENDING):
            try:
                validate_payment(payment_id=payment.id, validated_by=request.user)
                count += 1
            except PaymentAlreadyProcessedError:
                continue
        self.message_user(request, f'Validated {count} payment(s).')

    @admin.action(description='Reject selected payments')
    def reject_selected(self, request, queryset):
        count = 0
        for payment in queryset.filter(status=PaymentStatus.PENDING):
            try:
                reject_payment(payment_id=payment.id, rejected_by=request.user)
                count += 1
            except PaymentAlreadyProcessedError:
                continue
        self.message_user(request, f'Rejected {count} payment(s).')

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('user', 'match', 'validated_by')


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    """Read-only view of the credit ledger."""

    list_display = [
        'user',
        'signed_amount_display',
        'ref_type',
        'description',
        'balance_after',
        'created_at',
    ]

    list_filter = ['type', 'ref_type', 'created_at']
    search_fields = ['user__email', 'user__display_name', 'description']
    ordering = ['-created_at']

    def signed_amount_display(self, obj):
        color = '#27AE60' if obj.type == TransactionType.CREDIT else '#EB5757'
        return format_html('<span style="color: {};">{}</span>', color, obj.signed_amount)
    signed_amount_display.short_description = 'Amount'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
