"""Profile and account management services."""

import logging
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.contrib.auth import get_user_model

from apps.accounts.models import UserRole

from .exceptions import (
    PasswordConfirmationError,
    UserNotFoundError,
    InsufficientPermissionsError,
)

User = get_user_model()
logger = logging.getLogger(__name__)

EDITABLE_PROFILE_FIELDS = ('display_name', 'phone', 'photo_url')


def get_user_by_id(*, user_id: UUID) -> User:
    try:
        return User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")


@transaction.atomic
def update_profile(*, user_id: UUID, **fields) -> User:
    """
    Update the owner-editable part of a profile.

    Only display_name, phone and photo_url can be changed here; the credit
    balance and role are owned by the ledger and admin services.

    Raises:
        UserNotFoundError: If user doesn't exist
        ValueError: If a non-editable field is passed
    """
    unknown = set(fields) - set(EDITABLE_PROFILE_FIELDS)
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")

    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    for field, value in fields.items():
        setattr(user, field, value)

    if fields:
        user.save(update_fields=[*fields.keys(), 'updated_at'])

    return user


@transaction.atomic
def set_user_role(*, user_id: UUID, role: str, changed_by: User) -> User:
    """
    Promote or demote a user (admin only).

    Raises:
        InsufficientPermissionsError: If changed_by is not an admin
        UserNotFoundError: If user doesn't exist
        ValueError: If role is unknown
    """
    if not changed_by.is_group_admin:
        raise InsufficientPermissionsError("Only admins can change roles")

    if role not in UserRole.values:
        raise ValueError(f"Invalid role: {role}")

    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    user.role = role
    user.save(update_fields=['role', 'updated_at'])
    logger.info("User %s role set to %s by %s", user.id, role, changed_by.id)

    return user


def get_all_users(*, balance: Optional[str] = None) -> List[User]:
    """
    List active users ordered by name.

    Args:
        balance: 'positive' for players with credit, 'negative' for players
            in debt, None for everybody
    """
    queryset = User.objects.filter(is_active=True).order_by('display_name', 'email')

    if balance == 'positive':
        queryset = queryset.filter(credits__gt=0)
    elif balance == 'negative':
        queryset = queryset.filter(credits__lt=0)
    elif balance is not None:
        raise ValueError(f"Invalid balance filter: {balance}")

    return list(queryset)


@transaction.atomic
def delete_user_account(*, user_id: UUID, password: str) -> None:
    """
    Password-confirmed account deletion (anonymization).

    Args:
        user_id: User's ID
        password: User's password for confirmation

    Raises:
        PasswordConfirmationError: If password is incorrect
    """
    user = (
        User.objects
        .select_for_update()
        .get(id=user_id)
    )

    if not user.check_password(password):
        raise PasswordConfirmationError("Senha incorreta.")

    user.anonymize()
