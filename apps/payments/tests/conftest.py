import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.matches.models import Match, Participation, ParticipationStatus
from apps.payments.models import Payment, PaymentStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def player(db):
    """Create and return a player with zero balance."""
    return User.objects.create_user(
        email='player@example.com',
        password='TestPass123!',
        display_name='Player One',
    )


@pytest.fixture
def other_player(db):
    """Create and return a second player."""
    return User.objects.create_user(
        email='player2@example.com',
        password='TestPass123!',
        display_name='Player Two',
    )


@pytest.fixture
def admin_user(db):
    """Create and return a group admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def match(admin_user):
    """Upcoming match with a R$ 25,00 fee."""
    return Match.objects.create(
        title='Futebol de Terça',
        date=timezone.now() + timedelta(days=2),
        location='Arena Central',
        max_players=12,
        price_per_player=Decimal('25.00'),
        created_by=admin_user,
    )


@pytest.fixture
def confirmed_participation(match, player):
    """Player confirmed for the match, fee not paid yet."""
    return Participation.objects.create(
        match=match,
        user=player,
        status=ParticipationStatus.CONFIRMED,
    )


@pytest.fixture
def pending_payment(player):
    """R$ 50,00 payment waiting for validation."""
    return Payment.objects.create(
        user=player,
        amount=Decimal('50.00'),
        status=PaymentStatus.PENDING,
        entered_by=player,
        receipt_url='https://storage.example.com/receipts/1.jpg',
    )


@pytest.fixture
def authenticated_client(api_client, player):
    """Return an API client authenticated as the player."""
    refresh = RefreshToken.for_user(player)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def admin_client(admin_user):
    """Return API client authenticated as admin."""
    client = APIClient()
    refresh = RefreshToken.for_user(admin_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
