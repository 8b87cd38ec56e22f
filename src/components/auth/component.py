"""
Auth component - signup, login, token authentication and profile management.

Invariants:
- Plaintext passwords and stored hashes never appear in outputs or errors.
- A token that authenticates was issued by this service and has not expired.
- Authentication is local computation only; it never touches the user store.
"""

from __future__ import annotations

import re
from uuid import UUID, uuid4

from src.domain.entities import User
from src.domain.errors import DuplicateEmailError, ErrorKind, InvalidTokenError

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
from .ports import ClockPort, PasswordHasherPort, TokenCodecPort, UserRepoPort

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
BEARER_PREFIX = "Bearer "


# --- Helper Functions ---


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from a ``Bearer <token>`` header value, or None if absent/malformed."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):]
    if not token or any(c.isspace() for c in token):
        return None
    return token


def _password_error(password: str, min_length: int, label: str = "Password") -> str | None:
    if len(password) < min_length:
        return f"{label} must be at least {min_length} characters"
    return None


# --- Component Entry Points ---


def run_signup(
    inp: SignupInput,
    *,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    tokens: TokenCodecPort,
    clock: ClockPort,
    min_password_length: int = 6,
) -> AuthOutput:
    if not inp.email or not inp.password:
        return AuthOutput(
            error="Email and password are required", error_kind=ErrorKind.INVALID_REQUEST
        )

    email = normalize_email(inp.email)
    if not is_valid_email(email):
        return AuthOutput(
            error="Please provide a valid email", error_kind=ErrorKind.INVALID_REQUEST
        )

    pw_error = _password_error(inp.password, min_password_length)
    if pw_error:
        return AuthOutput(error=pw_error, error_kind=ErrorKind.INVALID_REQUEST)

    if user_repo.get_by_email(email):
        return AuthOutput(error="User already exists", error_kind=ErrorKind.INVALID_REQUEST)

    now = clock.now_utc()
    user = User(
        id=uuid4(),
        email=email,
        display_name=(inp.name or "").strip(),
        password_hash=hasher.hash_password(inp.password),
        created_at=now,
        updated_at=now,
    )
    try:
        user_repo.save(user)
    except DuplicateEmailError:
        # Lost a race with a concurrent signup for the same email
        return AuthOutput(error="User already exists", error_kind=ErrorKind.INVALID_REQUEST)

    token = tokens.issue(str(user.id), user.email)
    return AuthOutput(user=user, token=token, success=True)


def run_login(
    inp: LoginInput,
    *,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    tokens: TokenCodecPort,
    clock: ClockPort,
) -> AuthOutput:
    if not inp.email or not inp.password:
        return AuthOutput(
            error="Email and password are required", error_kind=ErrorKind.INVALID_REQUEST
        )

    user = user_repo.get_by_email(normalize_email(inp.email))
    if not user or not hasher.verify_password(inp.password, user.password_hash):
        return AuthOutput(error="Invalid credentials", error_kind=ErrorKind.UNAUTHENTICATED)

    if hasher.needs_rehash(user.password_hash):
        user.password_hash = hasher.hash_password(inp.password)
        user.updated_at = clock.now_utc()
        user_repo.save(user)

    token = tokens.issue(str(user.id), user.email)
    return AuthOutput(user=user, token=token, success=True)


def run_authenticate(inp: AuthenticateInput, *, tokens: TokenCodecPort) -> IdentityOutput:
    """
    Gate for privileged requests.

    Missing or non-Bearer credentials and every kind of verification failure
    are rejected; the two messages are the only distinction exposed.
    """
    token = extract_bearer_token(inp.authorization)
    if token is None:
        return IdentityOutput(error="missing credential")

    try:
        claims = tokens.verify(token)
    except InvalidTokenError:
        return IdentityOutput(error="invalid token")

    return IdentityOutput(identity=claims.to_identity(), success=True)


def _resolve_user(user_repo: UserRepoPort, user_id: str) -> User | None:
    try:
        uid = UUID(user_id)
    except (ValueError, TypeError):
        return None
    return user_repo.get_by_id(uid)


def run_get_current_user(inp: CurrentUserInput, *, user_repo: UserRepoPort) -> UserOutput:
    user = _resolve_user(user_repo, inp.identity.id)
    if not user:
        return UserOutput(error="User not found", error_kind=ErrorKind.NOT_FOUND)
    return UserOutput(user=user, success=True)


def run_update_profile(
    inp: UpdateProfileInput,
    *,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    clock: ClockPort,
    min_password_length: int = 6,
) -> UserOutput:
    stored = _resolve_user(user_repo, inp.identity.id)
    if not stored:
        return UserOutput(error="User not found", error_kind=ErrorKind.NOT_FOUND)

    # A rejected update must leave the stored user untouched
    user = stored.model_copy()

    if inp.name is not None:
        user.display_name = inp.name.strip()

    if inp.email is not None:
        email = normalize_email(inp.email)
        if not is_valid_email(email):
            return UserOutput(
                error="Please provide a valid email", error_kind=ErrorKind.INVALID_REQUEST
            )
        if email != user.email:
            if user_repo.get_by_email(email):
                return UserOutput(
                    error="Email already in use", error_kind=ErrorKind.INVALID_REQUEST
                )
            user.email = email

    if inp.new_password is not None:
        if not inp.current_password:
            return UserOutput(
                error="Current password is required to change password",
                error_kind=ErrorKind.INVALID_REQUEST,
            )
        if not hasher.verify_password(inp.current_password, user.password_hash):
            return UserOutput(
                error="Current password is incorrect", error_kind=ErrorKind.UNAUTHENTICATED
            )
        pw_error = _password_error(inp.new_password, min_password_length, label="New password")
        if pw_error:
            return UserOutput(error=pw_error, error_kind=ErrorKind.INVALID_REQUEST)
        user.password_hash = hasher.hash_password(inp.new_password)

    user.updated_at = clock.now_utc()
    try:
        user_repo.save(user)
    except DuplicateEmailError:
        return UserOutput(error="Email already in use", error_kind=ErrorKind.INVALID_REQUEST)
    return UserOutput(user=user, success=True)
