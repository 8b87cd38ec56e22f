"""
Auth component unit tests.

Tests for signup, login, bearer authentication and profile updates.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from src.components.auth import (
    AuthenticateInput,
    CurrentUserInput,
    LoginInput,
    SignupInput,
    UpdateProfileInput,
    extract_bearer_token,
    normalize_email,
    run_authenticate,
    run_get_current_user,
    run_login,
    run_signup,
    run_update_profile,
)
from src.domain.entities import Identity, TokenClaims, User
from src.domain.errors import DuplicateEmailError, ErrorKind, InvalidTokenError

# --- Mock Implementations ---


class MockUserRepo:
    """In-memory user repository for testing."""

    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}
        self.saves = 0

    def get_by_email(self, email: str) -> User | None:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    def get_by_id(self, user_id: object) -> User | None:
        if isinstance(user_id, UUID):
            return self._users.get(user_id)
        return None

    def save(self, user: User) -> User:
        self.saves += 1
        self._users[user.id] = user
        return user


class RacingUserRepo(MockUserRepo):
    """Email lookups miss, as when a concurrent write lands after the check."""

    def get_by_email(self, email: str) -> User | None:
        return None

    def save(self, user: User) -> User:
        for other in self._users.values():
            if other.id != user.id and other.email == user.email:
                raise DuplicateEmailError(user.email)
        return super().save(user)


class MockHasher:
    """Hash is "hashed_" + plain; ``stale`` hashes report needing rehash."""

    def hash_password(self, password: str) -> str:
        return f"hashed_{password}"

    def verify_password(self, plain: str, hashed: str) -> bool:
        return hashed in (f"hashed_{plain}", f"stale_{plain}")

    def needs_rehash(self, hashed: str) -> bool:
        return hashed.startswith("stale_")


class MockTokens:
    """Tokens are "token:<sub>:<email>"; anything else is invalid."""

    def __init__(self, now: datetime) -> None:
        self._now = now

    def issue(self, subject_id: str, email: str) -> str:
        return f"token:{subject_id}:{email}"

    def verify(self, token: str) -> TokenClaims:
        parts = token.split(":")
        if len(parts) != 3 or parts[0] != "token":
            raise InvalidTokenError()
        return TokenClaims(
            subject_id=parts[1],
            email=parts[2],
            issued_at=self._now,
            expires_at=self._now + timedelta(days=7),
        )


class MockClock:
    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._time = fixed_time or datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._time


# --- Fixtures ---


@pytest.fixture
def user_repo() -> MockUserRepo:
    return MockUserRepo()


@pytest.fixture
def hasher() -> MockHasher:
    return MockHasher()


@pytest.fixture
def clock() -> MockClock:
    return MockClock()


@pytest.fixture
def tokens(clock: MockClock) -> MockTokens:
    return MockTokens(clock.now_utc())


@pytest.fixture
def admin_user(user_repo: MockUserRepo, clock: MockClock) -> User:
    """Create and save an admin user."""
    user = User(
        id=uuid4(),
        email="admin@clinic.com",
        display_name="Admin User",
        password_hash="hashed_admin123",
        created_at=clock.now_utc(),
        updated_at=clock.now_utc(),
    )
    user_repo.save(user)
    return user


def _identity(user: User) -> Identity:
    return Identity(id=str(user.id), email=user.email)


# --- Helper Tests ---


class TestHelpers:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            (None, None),
            ("", None),
            ("Bearer ", None),
            ("bearer abc", None),
            ("Basic dXNlcjpwYXNz", None),
            ("abc.def.ghi", None),
            ("Bearer abc def", None),
        ],
    )
    def test_extract_bearer_token(self, header: str | None, expected: str | None) -> None:
        assert extract_bearer_token(header) == expected

    def test_normalize_email(self) -> None:
        assert normalize_email("  Admin@Clinic.COM ") == "admin@clinic.com"


# --- Signup Tests ---


class TestSignup:
    """Test run_signup functionality."""

    def test_signup_success(
        self,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        tokens: MockTokens,
        clock: MockClock,
    ) -> None:
        inp = SignupInput(email=" New@Clinic.com ", password="secret1", name=" Dr Who ")
        result = run_signup(inp, user_repo=user_repo, hasher=hasher, tokens=tokens, clock=clock)

        assert result.success is True
        assert result.user is not None
        assert result.user.email == "new@clinic.com"
        assert result.user.display_name == "Dr Who"
        assert result.user.password_hash == "hashed_secret1"
        assert result.token == f"token:{result.user.id}:new@clinic.com"
        assert user_repo.get_by_email("new@clinic.com") is not None

    @pytest.mark.parametrize(
        "email,password,message",
        [
            ("", "secret1", "Email and password are required"),
            ("a@b.com", "", "Email and password are required"),
            ("not-an-email", "secret1", "Please provide a valid email"),
            ("a@b.com", "12345", "Password must be at least 6 characters"),
        ],
    )
    def test_signup_rejects_bad_input(
        self,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        tokens: MockTokens,
        clock: MockClock,
        email: str,
        password: str,
        message: str,
    ) -> None:
        result = run_signup(
            SignupInput(email=email, password=password),
            user_repo=user_repo,
            hasher=hasher,
            tokens=tokens,
            clock=clock,
        )

        assert result.success is False
        assert result.error == message
        assert result.error_kind == ErrorKind.INVALID_REQUEST
        assert user_repo.saves == 0

    def test_signup_duplicate_email(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        tokens: MockTokens,
        clock: MockClock,
    ) -> None:
        result = run_signup(
            SignupInput(email="ADMIN@clinic.com", password="another1"),
            user_repo=user_repo,
            hasher=hasher,
            tokens=tokens,
            clock=clock,
        )

        assert result.success is False
        assert result.error == "User already exists"
        assert result.token is None

    def test_signup_duplicate_detected_at_save(
        self, hasher: MockHasher, tokens: MockTokens, clock: MockClock
    ) -> None:
        repo = RacingUserRepo()
        repo.save(User(email="admin@clinic.com", password_hash="hashed_x"))

        result = run_signup(
            SignupInput(email="admin@clinic.com", password="another1"),
            user_repo=repo,
            hasher=hasher,
            tokens=tokens,
            clock=clock,
        )

        assert result.success is False
        assert result.error == "User already exists"
        assert result.error_kind == ErrorKind.INVALID_REQUEST
        assert result.token is None
        assert len(repo._users) == 1


# --- Login Tests ---


class TestLogin:
    """Test run_login functionality."""

    def test_login_success(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        tokens: MockTokens,
        clock: MockClock,
    ) -> None:
        result = run_login(
            LoginInput(email="admin@clinic.com", password="admin123"),
            user_repo=user_repo,
            hasher=hasher,
            tokens=tokens,
            clock=clock,
        )

        assert result.success is True
        assert result.user is not None
        assert result.user.id == admin_user.id
        assert result.token == f"token:{admin_user.id}:admin@clinic.com"
        assert result.error is None

    def test_login_unknown_email_and_wrong_password_look_the_same(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        tokens: MockTokens,
        clock: MockClock,
    ) -> None:
        unknown = run_login(
            LoginInput(email="nobody@clinic.com", password="admin123"),
            user_repo=user_repo,
            hasher=hasher,
            tokens=tokens,
            clock=clock,
        )
        wrong = run_login(
            LoginInput(email="admin@clinic.com", password="wrong-password"),
            user_repo=user_repo,
            hasher=hasher,
            tokens=tokens,
            clock=clock,
        )

        for result in (unknown, wrong):
            assert result.success is False
            assert result.error == "Invalid credentials"
            assert result.error_kind == ErrorKind.UNAUTHENTICATED
            assert result.token is None

    def test_login_missing_fields(
        self,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        tokens: MockTokens,
        clock: MockClock,
    ) -> None:
        result = run_login(
            LoginInput(email="", password=""),
            user_repo=user_repo,
            hasher=hasher,
            tokens=tokens,
            clock=clock,
        )

        assert result.success is False
        assert result.error_kind == ErrorKind.INVALID_REQUEST

    def test_login_rehashes_outdated_hash(
        self,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        tokens: MockTokens,
        clock: MockClock,
    ) -> None:
        user = User(email="old@clinic.com", password_hash="stale_pw12345")
        user_repo.save(user)

        result = run_login(
            LoginInput(email="old@clinic.com", password="pw12345"),
            user_repo=user_repo,
            hasher=hasher,
            tokens=tokens,
            clock=clock,
        )

        assert result.success is True
        stored = user_repo.get_by_email("old@clinic.com")
        assert stored is not None
        assert stored.password_hash == "hashed_pw12345"


# --- Authenticate Tests ---


class TestAuthenticate:
    """Test run_authenticate (the auth guard)."""

    def test_valid_bearer_token(self, tokens: MockTokens) -> None:
        result = run_authenticate(
            AuthenticateInput(authorization="Bearer token:u-1:a@b.com"), tokens=tokens
        )

        assert result.success is True
        assert result.identity == Identity(id="u-1", email="a@b.com")

    @pytest.mark.parametrize("header", [None, "", "Token token:u-1:a@b.com", "token:u-1:a@b.com"])
    def test_missing_credential(self, tokens: MockTokens, header: str | None) -> None:
        result = run_authenticate(AuthenticateInput(authorization=header), tokens=tokens)

        assert result.success is False
        assert result.identity is None
        assert result.error == "missing credential"

    def test_invalid_token(self, tokens: MockTokens) -> None:
        result = run_authenticate(AuthenticateInput(authorization="Bearer garbage"), tokens=tokens)

        assert result.success is False
        assert result.error == "invalid token"


# --- Current User Tests ---


class TestCurrentUser:
    def test_returns_stored_user(self, admin_user: User, user_repo: MockUserRepo) -> None:
        result = run_get_current_user(
            CurrentUserInput(identity=_identity(admin_user)), user_repo=user_repo
        )

        assert result.success is True
        assert result.user is admin_user

    def test_unknown_subject(self, user_repo: MockUserRepo) -> None:
        result = run_get_current_user(
            CurrentUserInput(identity=Identity(id=str(uuid4()), email="x@y.com")),
            user_repo=user_repo,
        )

        assert result.success is False
        assert result.error == "User not found"
        assert result.error_kind == ErrorKind.NOT_FOUND

    def test_non_uuid_subject(self, user_repo: MockUserRepo) -> None:
        result = run_get_current_user(
            CurrentUserInput(identity=Identity(id="not-a-uuid", email="x@y.com")),
            user_repo=user_repo,
        )

        assert result.error_kind == ErrorKind.NOT_FOUND


# --- Profile Tests ---


class TestUpdateProfile:
    """Test run_update_profile functionality."""

    def test_update_name_and_email(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        clock: MockClock,
    ) -> None:
        result = run_update_profile(
            UpdateProfileInput(
                identity=_identity(admin_user), name="  Head Admin ", email=" Boss@Clinic.com"
            ),
            user_repo=user_repo,
            hasher=hasher,
            clock=clock,
        )

        assert result.success is True
        assert result.user is not None
        assert result.user.display_name == "Head Admin"
        assert result.user.email == "boss@clinic.com"

    def test_email_taken_by_other_user(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        clock: MockClock,
    ) -> None:
        user_repo.save(User(email="other@clinic.com", password_hash="hashed_x"))

        result = run_update_profile(
            UpdateProfileInput(identity=_identity(admin_user), email="other@clinic.com"),
            user_repo=user_repo,
            hasher=hasher,
            clock=clock,
        )

        assert result.success is False
        assert result.error == "Email already in use"

    def test_email_taken_detected_at_save(
        self, hasher: MockHasher, clock: MockClock
    ) -> None:
        repo = RacingUserRepo()
        me = repo.save(User(email="me@clinic.com", password_hash="hashed_x"))
        repo.save(User(email="other@clinic.com", password_hash="hashed_y"))

        result = run_update_profile(
            UpdateProfileInput(identity=_identity(me), email="other@clinic.com"),
            user_repo=repo,
            hasher=hasher,
            clock=clock,
        )

        assert result.success is False
        assert result.error == "Email already in use"
        assert result.error_kind == ErrorKind.INVALID_REQUEST
        assert repo._users[me.id].email == "me@clinic.com"

    def test_change_password(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        clock: MockClock,
    ) -> None:
        result = run_update_profile(
            UpdateProfileInput(
                identity=_identity(admin_user),
                current_password="admin123",
                new_password="newpass1",
            ),
            user_repo=user_repo,
            hasher=hasher,
            clock=clock,
        )

        assert result.success is True
        assert result.user is not None
        assert result.user.password_hash == "hashed_newpass1"

    def test_change_password_wrong_current(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        clock: MockClock,
    ) -> None:
        result = run_update_profile(
            UpdateProfileInput(
                identity=_identity(admin_user),
                current_password="nope",
                new_password="newpass1",
            ),
            user_repo=user_repo,
            hasher=hasher,
            clock=clock,
        )

        assert result.success is False
        assert result.error_kind == ErrorKind.UNAUTHENTICATED
        assert admin_user.password_hash == "hashed_admin123"

    def test_change_password_requires_current(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        clock: MockClock,
    ) -> None:
        result = run_update_profile(
            UpdateProfileInput(identity=_identity(admin_user), new_password="newpass1"),
            user_repo=user_repo,
            hasher=hasher,
            clock=clock,
        )

        assert result.success is False
        assert result.error_kind == ErrorKind.INVALID_REQUEST

    def test_new_password_too_short(
        self,
        admin_user: User,
        user_repo: MockUserRepo,
        hasher: MockHasher,
        clock: MockClock,
    ) -> None:
        result = run_update_profile(
            UpdateProfileInput(
                identity=_identity(admin_user), current_password="admin123", new_password="abc"
            ),
            user_repo=user_repo,
            hasher=hasher,
            clock=clock,
        )

        assert result.success is False
        assert result.error == "New password must be at least 6 characters"
