from datetime import datetime
from typing import Protocol

from src.domain.entities import TokenClaims, User


class UserRepoPort(Protocol):
    """Credential store: users keyed by id, unique by email."""

    def get_by_email(self, email: str) -> User | None: ...
    def get_by_id(self, user_id: object) -> User | None: ...
    def save(self, user: User) -> User:
        """Insert or update by id. Raises DuplicateEmailError if another user holds the email."""
        ...


class PasswordHasherPort(Protocol):
    def hash_password(self, password: str) -> str: ...
    def verify_password(self, plain: str, hashed: str) -> bool: ...

    def needs_rehash(self, hashed: str) -> bool:
        """True if the hash was produced with outdated parameters."""
        ...


class TokenCodecPort(Protocol):
    def issue(self, subject_id: str, email: str) -> str: ...

    def verify(self, token: str) -> TokenClaims:
        """Raises InvalidTokenError if the token is malformed, forged or expired."""
        ...


class ClockPort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
