from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from .models import Payment, PaymentStatus, CreditTransaction


# =============================================================================
# Input Serializers
# =============================================================================

class PaymentFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for payment listing.

    Query Parameters:
        status (str): pending, validated or rejected
        user (UUID): Only for admins, payments of one player
    """

    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    user = serializers.UUIDField(required=False)


class PaymentCreateSerializer(serializers.Serializer):
    """Player-submitted payment claim, optionally with a receipt."""

    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.01')
    )
    receipt_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    match = serializers.UUIDField(required=False, allow_null=True)
    vision_analysis = serializers.JSONField(required=False, allow_null=True)


class ManualPaymentSerializer(serializers.Serializer):
    """Admin entry of money received outside the app."""

    user = serializers.UUIDField()
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.01')
    )
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)


class CreditAdjustmentSerializer(serializers.Serializer):
    """Signed admin correction of a balance."""

    user = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_amount(self, value):
        if value == 0:
            raise serializers.ValidationError('O valor do ajuste não pode ser zero.')
        return value


class ReceiptAnalysisRequestSerializer(serializers.Serializer):
    image_url = serializers.URLField(max_length=500)


class PixRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.01')
    )


# =============================================================================
# Output Serializers
# =============================================================================

class PaymentSerializer(serializers.ModelSerializer):
    user = UserPublicSerializer(read_only=True)
    entered_by = UserPublicSerializer(read_only=True)
    validated_by = UserPublicSerializer(read_only=True)
    match_title = serializers.CharField(source='match.title', read_only=True, default=None)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'user',
            'match',
            'match_title',
            'amount',
            'currency',
            'receipt_url',
            'description',
            'status',
            'status_display',
            'entered_by',
            'entered_by_admin',
            'vision_analysis',
            'validated_at',
            'validated_by',
            'created_at',
        ]
        read_only_fields = fields


class CreditTransactionSerializer(serializers.ModelSerializer):
    match_title = serializers.CharField(source='match.title', read_only=True, default=None)
    signed_amount = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = CreditTransaction
        fields = [
            'id',
            'type',
            'amount',
            'signed_amount',
            'ref_type',
            'payment',
            'match',
            'match_title',
            'description',
            'balance_after',
            'created_at',
        ]
        read_only_fields = fields


class ReceiptAnalysisSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, allow_null=True)
    date = serializers.CharField(allow_null=True)
    raw_text = serializers.CharField(allow_blank=True)


class PixCodeSerializer(serializers.Serializer):
    payload = serializers.CharField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    qr_code_base64 = serializers.CharField()
