"""
Service layer unit tests for accounts app.
"""

import pytest
from uuid import uuid4

from apps.accounts.models import UserRole
from apps.accounts.services import (
    register_user,
    authenticate_user,
    update_profile,
    set_user_role,
    get_all_users,
    delete_user_account,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    PasswordConfirmationError,
    InsufficientPermissionsError,
)


@pytest.mark.django_db
class TestRegisterUser:

    def test_register_normalizes_email_domain(self):
        user = register_user(email='Someone@EXAMPLE.com', password='SecurePass123!', display_name='S')

        assert user.email == 'Someone@example.com'

    def test_register_duplicate_is_case_insensitive(self, user):
        with pytest.raises(UserRegistrationError):
            register_user(email='TESTUSER@example.com', password='SecurePass123!')


@pytest.mark.django_db
class TestAuthenticateUser:

    def test_authenticate_success(self, user):
        assert authenticate_user(email=user.email, password='TestPass123!') == user

    def test_authenticate_bad_password(self, user):
        with pytest.raises(InvalidCredentialsError):
            authenticate_user(email=user.email, password='bad')

    def test_authenticate_inactive(self, user_inactive):
        with pytest.raises(InactiveAccountError):
            authenticate_user(email=user_inactive.email, password='TestPass123!')


@pytest.mark.django_db
class TestProfileManagement:

    def test_update_profile_rejects_credits(self, user):
        with pytest.raises(ValueError):
            update_profile(user_id=user.id, credits=100)

    def test_update_profile_unknown_user(self):
        with pytest.raises(UserNotFoundError):
            update_profile(user_id=uuid4(), display_name='X')

    def test_set_role_requires_admin(self, user, other_user):
        with pytest.raises(InsufficientPermissionsError):
            set_user_role(user_id=other_user.id, role=UserRole.ADMIN, changed_by=user)

    def test_set_role_by_admin(self, admin_user, user):
        updated = set_user_role(user_id=user.id, role=UserRole.ADMIN, changed_by=admin_user)

        assert updated.role == UserRole.ADMIN

    def test_get_all_users_balance_filters(self, user, other_user, admin_user):
        assert get_all_users(balance='positive') == [admin_user]
        assert get_all_users(balance='negative') == [other_user]
        assert len(get_all_users()) == 3

    def test_get_all_users_excludes_inactive(self, user, user_inactive):
        assert user_inactive not in get_all_users()

    def test_delete_requires_password(self, user):
        with pytest.raises(PasswordConfirmationError):
            delete_user_account(user_id=user.id, password='wrong')


@pytest.mark.django_db
class TestSampleDataCommand:

    def test_creates_players_and_match(self):
        from io import StringIO
        from django.core.management import call_command
        from apps.accounts.models import User
        from apps.matches.models import Match, ParticipationStatus
        from apps.payments.services import reconcile_balance

        call_command('create_sample_data', stdout=StringIO())

        match = Match.objects.get(title='Futebol de Terça')
        assert User.objects.count() == 21
        assert match.confirmed_count() == 12
        assert match.is_full()
        assert match.participations.filter(status=ParticipationStatus.PENDING).count() == 3
        assert match.participations.filter(status=ParticipationStatus.DECLINED).count() == 1

        for user in User.objects.all():
            assert reconcile_balance(user_id=user.id)['drift'] == 0
