import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.matches.models import Match, MatchStatus, Participation, ParticipationStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def organizer(db):
    """Player who creates matches."""
    return User.objects.create_user(
        email='organizer@example.com',
        password='TestPass123!',
        display_name='Organizer',
    )


@pytest.fixture
def player(db):
    return User.objects.create_user(
        email='player@example.com',
        password='TestPass123!',
        display_name='Player One',
    )


@pytest.fixture
def other_player(db):
    return User.objects.create_user(
        email='player2@example.com',
        password='TestPass123!',
        display_name='Player Two',
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def match(organizer):
    """Upcoming match, R$ 25,00 per player, 12 spots."""
    return Match.objects.create(
        title='Futebol de Terça',
        date=timezone.now() + timedelta(days=2),
        location='Arena Central',
        max_players=12,
        price_per_player=Decimal('25.00'),
        is_recurring=True,
        recurring_day=2,
        created_by=organizer,
    )


@pytest.fixture
def small_match(organizer):
    """Upcoming match with a single spot."""
    return Match.objects.create(
        title='Racha',
        date=timezone.now() + timedelta(days=1),
        location='Quadra 2',
        max_players=1,
        price_per_player=Decimal('20.00'),
        created_by=organizer,
    )


@pytest.fixture
def past_match(organizer):
    return Match.objects.create(
        title='Jogo Antigo',
        date=timezone.now() - timedelta(days=7),
        location='Arena Central',
        max_players=10,
        price_per_player=Decimal('25.00'),
        status=MatchStatus.COMPLETED,
        created_by=organizer,
    )


@pytest.fixture
def confirmed_player(match, player):
    """Player confirmed on the match, fee not paid."""
    return Participation.objects.create(
        match=match,
        user=player,
        status=ParticipationStatus.CONFIRMED,
    )


@pytest.fixture
def authenticated_client(api_client, player):
    """Return an API client authenticated as the player."""
    refresh = RefreshToken.for_user(player)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def organizer_client(organizer):
    """Return API client authenticated as the match organizer."""
    client = APIClient()
    refresh = RefreshToken.for_user(organizer)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
