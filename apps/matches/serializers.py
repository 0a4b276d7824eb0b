from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from .models import Match, MatchStatus, Participation, ParticipationStatus


# =============================================================================
# Input Serializers
# =============================================================================

class MatchFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for match listing.

    Query Parameters:
        scope (str): upcoming (default), past or all
    """

    scope = serializers.ChoiceField(
        choices=['upcoming', 'past', 'all'],
        required=False,
        default='upcoming'
    )


class MatchWriteSerializer(serializers.Serializer):
    """Fields accepted when creating or editing a match."""

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    date = serializers.DateTimeField()
    location = serializers.CharField(max_length=200)
    max_players = serializers.IntegerField(min_value=1)
    price_per_player = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.00')
    )
    is_recurring = serializers.BooleanField(required=False, default=False)
    recurring_day = serializers.IntegerField(
        min_value=0,
        max_value=6,
        required=False,
        allow_null=True
    )

    def validate(self, attrs):
        if attrs.get('is_recurring') and attrs.get('recurring_day') is None:
            raise serializers.ValidationError({
                'recurring_day': 'Informe o dia da semana da partida recorrente.'
            })
        return attrs


class ParticipantInputSerializer(serializers.Serializer):
    """Target user for invite, removal and payment toggle."""

    user = serializers.UUIDField()


# =============================================================================
# Output Serializers
# =============================================================================

class ParticipationSerializer(serializers.ModelSerializer):
    user = UserPublicSerializer(read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Participation
        fields = [
            'id',
            'user',
            'status',
            'status_display',
            'paid',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class MatchListSerializer(serializers.ModelSerializer):
    """Match card: counts and the caller's own status, no roster."""

    created_by = UserPublicSerializer(read_only=True)
    confirmed_count = serializers.SerializerMethodField()
    my_status = serializers.SerializerMethodField()

    class Meta:
        model = Match
        fields = [
            'id',
            'title',
            'date',
            'location',
            'max_players',
            'price_per_player',
            'is_recurring',
            'recurring_day',
            'status',
            'created_by',
            'confirmed_count',
            'my_status',
        ]
        read_only_fields = fields

    def get_confirmed_count(self, obj):
        annotated = getattr(obj, 'confirmed_total', None)
        return annotated if annotated is not None else obj.confirmed_count()

    def get_my_status(self, obj):
        request = self.context.get('request')
        if not request or not request.user.is_authenticated:
            return None
        participation = obj.get_participation(request.user)
        return participation.status if participation else 'absent'


class MatchSerializer(MatchListSerializer):
    """Full match with roster."""

    participations = ParticipationSerializer(many=True, read_only=True)
    spots_left = serializers.SerializerMethodField()
    is_full = serializers.SerializerMethodField()

    class Meta(MatchListSerializer.Meta):
        fields = MatchListSerializer.Meta.fields + [
            'description',
            'spots_left',
            'is_full',
            'participations',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_spots_left(self, obj):
        return obj.spots_left()

    def get_is_full(self, obj):
        return obj.is_full()


class MatchSummarySerializer(serializers.Serializer):
    match = MatchListSerializer()
    confirmed = ParticipationSerializer(many=True)
    pending = ParticipationSerializer(many=True)
    declined = ParticipationSerializer(many=True)
    confirmed_count = serializers.IntegerField()
    paid_count = serializers.IntegerField()
    is_full = serializers.BooleanField()
    collected_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    expected_amount = serializers.DecimalField(max_digits=10, decimal_places=2)


class OutstandingSerializer(serializers.Serializer):
    matches = MatchListSerializer(many=True)
    count = serializers.IntegerField()
    total_debt = serializers.DecimalField(max_digits=10, decimal_places=2)
