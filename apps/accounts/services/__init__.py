"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    PasswordConfirmationError,
    InsufficientPermissionsError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .account_management import (
    get_user_by_id,
    update_profile,
    set_user_role,
    get_all_users,
    delete_user_account,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'PasswordConfirmationError',
    'InsufficientPermissionsError',
    # Services
    'register_user',
    'authenticate_user',
    'get_user_by_id',
    'update_profile',
    'set_user_role',
    'get_all_users',
    'delete_user_account',
]
