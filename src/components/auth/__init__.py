"""
Auth component - Authentication and account management.

Handles signup, login, bearer-token authentication and profile updates.
"""

from .component import (
    extract_bearer_token,
    is_valid_email,
    normalize_email,
    run_authenticate,
    run_get_current_user,
    run_login,
    run_signup,
    run_update_profile,
)
from .models import (
    AuthenticateInput,
    AuthOutput,
    CurrentUserInput,
    IdentityOutput,
    LoginInput,
    SignupInput,
    UpdateProfileInput,
    UserOutput,
)
from .ports import (
    ClockPort,
    PasswordHasherPort,
    TokenCodecPort,
    UserRepoPort,
)

__all__ = [
    # Entry points
    "run_authenticate",
    "run_get_current_user",
    "run_login",
    "run_signup",
    "run_update_profile",
    # Helpers
    "extract_bearer_token",
    "is_valid_email",
    "normalize_email",
    # Models
    "AuthenticateInput",
    "AuthOutput",
    "CurrentUserInput",
    "IdentityOutput",
    "LoginInput",
    "SignupInput",
    "UpdateProfileInput",
    "UserOutput",
    # Ports
    "ClockPort",
    "PasswordHasherPort",
    "TokenCodecPort",
    "UserRepoPort",
]
