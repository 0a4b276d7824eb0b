"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)

EMAIL_IN_USE_MESSAGE = 'Este e-mail já está em uso.'


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = "",
    phone: str = ""
) -> User:
    """
    Register a new player with an empty credit balance.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        display_name: Optional display name
        phone: Optional contact phone

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is taken or creation fails
    """
    normalized = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=normalized).exists():
        raise UserRegistrationError(EMAIL_IN_USE_MESSAGE)

    try:
        user = User.objects.create_user(
            email=normalized,
            password=password,
            display_name=display_name,
            phone=phone,
        )
    except IntegrityError:
        raise UserRegistrationError(EMAIL_IN_USE_MESSAGE)

    logger.info("Registered user %s", user.id)
    return user
