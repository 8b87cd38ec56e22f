from dataclasses import dataclass

from src.domain.entities import Identity, User
from src.domain.errors import ErrorKind


@dataclass
class SignupInput:
    email: str
    password: str
    name: str | None = None


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class AuthenticateInput:
    authorization: str | None


@dataclass
class CurrentUserInput:
    identity: Identity


@dataclass
class UpdateProfileInput:
    identity: Identity
    name: str | None = None
    email: str | None = None
    current_password: str | None = None
    new_password: str | None = None


@dataclass
class AuthOutput:
    user: User | None = None
    token: str | None = None
    success: bool = False
    error: str | None = None
    error_kind: ErrorKind | None = None


@dataclass
class IdentityOutput:
    identity: Identity | None = None
    success: bool = False
    error: str | None = None


@dataclass
class UserOutput:
    user: User | None = None
    success: bool = False
    error: str | None = None
    error_kind: ErrorKind | None = None
