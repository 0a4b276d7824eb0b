# ==========================================
# apps/matches/models.py
# ==========================================

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
import uuid


class MatchStatus(models.TextChoices):
    UPCOMING = 'upcoming', 'Agendada'
    COMPLETED = 'completed', 'Realizada'
    CANCELLED = 'cancelled', 'Cancelada'


class ParticipationStatus(models.TextChoices):
    PENDING = 'pending', 'Convidado'
    CONFIRMED = 'confirmed', 'Confirmado'
    DECLINED = 'declined', 'Recusado'


class Match(models.Model):
    """A scheduled pickup match with a capacity, a per-player fee and a roster."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    date = models.DateTimeField()
    location = models.CharField(max_length=200)
    
    max_players = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price_per_player = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    
    # Weekly recurrence: 0=Sunday ... 6=Saturday
    is_recurring = models.BooleanField(default=False)
    recurring_day = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(6)]
    )
    
    status = models.CharField(
        max_length=20,
        choices=MatchStatus.choices,
        default=MatchStatus.UPCOMING
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='matches_created'
    )
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'matches'
        indexes = [
            models.Index(fields=['status', 'date']),
            models.Index(fields=['date']),
        ]
        ordering = ['date']
    
    def __str__(self):
        return f"{self.title} ({self.date:%d/%m/%Y %H:%M})"
    
    @property
    def is_open(self):
        return self.status == MatchStatus.UPCOMING
    
    def confirmed_count(self):
        return self.participations.filter(status=ParticipationStatus.CONFIRMED).count()
    
    def is_full(self):
        """Only confirmed players take a spot; pending and declined never count."""
        return self.confirmed_count() >= self.max_players
    
    def spots_left(self):
        return max(0, self.max_players - self.confirmed_count())
    
    def can_manage(self, user):
        return self.created_by_id == user.id or user.is_group_admin
    
    def get_participation(self, user):
        try:
            return self.participations.get(user=user)
        except Participation.DoesNotExist:
            return None


class Participation(models.Model):
    """
    A user's response to a match.

    No row means the user is absent from the roster. ``paid`` only carries
    meaning while the status is confirmed.
    """
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    match = models.ForeignKey(Match, on_delete=models.CASCADE, related_name='participations')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='participations')
    status = models.CharField(
        max_length=20,
        choices=ParticipationStatus.choices,
        default=ParticipationStatus.PENDING
    )
    paid = models.BooleanField(default=False)
    
    invited_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invitations_sent'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'match_participations'
        unique_together = [['match', 'user']]
        indexes = [
            models.Index(fields=['match', 'status']),
            models.Index(fields=['user', 'status', 'paid']),
        ]
        ordering = ['created_at']
    
    def __str__(self):
        paid = 'paid' if self.paid else 'unpaid'
        return f"{self.user.get_display_name()} in {self.match.title} ({self.status}, {paid})"
