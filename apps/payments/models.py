from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pendente'
    VALIDATED = 'validated', 'Validado'
    REJECTED = 'rejected', 'Rejeitado'


class TransactionType(models.TextChoices):
    CREDIT = 'credit', 'Crédito'
    DEBIT = 'debit', 'Débito'


class TransactionRefType(models.TextChoices):
    PAYMENT = 'payment', 'Pagamento'
    MATCH = 'match', 'Partida'
    ADJUSTMENT = 'adjustment', 'Ajuste'


class Payment(models.Model):
    """Money a player claims to have sent, waiting for an admin to validate it."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='payments'
    )
    match = models.ForeignKey(
        'matches.Match',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3, default='BRL')
    receipt_url = models.URLField(max_length=500, blank=True)
    description = models.CharField(max_length=255, blank=True)
    
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    
    # Who typed it in: the player or an admin on their behalf
    entered_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='payments_entered'
    )
    entered_by_admin = models.BooleanField(default=False)
    
    # Best-effort OCR output used to pre-fill the form, never authoritative
    vision_analysis = models.JSONField(null=True, blank=True)
    
    validated_at = models.DateTimeField(null=True, blank=True)
    validated_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments_reviewed'
    )
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['user', 'created_at']),
            models.Index(fields=['status', 'created_at']),
        ]
        ordering = ['-created_at']
    
    def __str__(self):
        return f"{self.user.get_display_name()} - R$ {self.amount} ({self.status})"
    
    @property
    def is_pending(self):
        return self.status == PaymentStatus.PENDING


class CreditTransaction(models.Model):
    """
    Ledger record: one row per change of a user's credit balance.

    ``balance_after`` is the balance right after this record was applied.
    """
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='credit_transactions'
    )
    type = models.CharField(max_length=10, choices=TransactionType.choices)
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    
    ref_type = models.CharField(max_length=20, choices=TransactionRefType.choices)
    payment = models.ForeignKey(
        Payment,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='credit_transactions'
    )
    match = models.ForeignKey(
        'matches.Match',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='credit_transactions'
    )
    
    description = models.CharField(max_length=255)
    balance_after = models.DecimalField(max_digits=10, decimal_places=2)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='credit_transactions_made'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    
    class Meta:
        db_table = 'credit_transactions'
        indexes = [
            models.Index(fields=['user', 'created_at']),
            models.Index(fields=['user', 'match']),
        ]
        ordering = ['-created_at']
    
    def __str__(self):
        sign = '+' if self.type == TransactionType.CREDIT else '-'
        return f"{self.user.get_display_name()} {sign}R$ {self.amount} ({self.description})"
    
    @property
    def signed_amount(self):
        return self.amount if self.type == TransactionType.CREDIT else -self.amount
