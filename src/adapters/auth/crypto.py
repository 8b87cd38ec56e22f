from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt
from jose.exceptions import JOSEError
from passlib.context import CryptContext

from src.adapters.clock import SystemClock
from src.components.auth.ports import ClockPort
from src.domain.entities import TokenClaims
from src.domain.errors import InvalidTokenError


class PasslibPasswordHasher:
    """Argon2 password hashing via passlib; ``work_factor`` is the argon2 time cost."""

    def __init__(self, work_factor: int = 3) -> None:
        self._context = CryptContext(
            schemes=["argon2"],
            deprecated="auto",
            argon2__rounds=work_factor,
            argon2__min_rounds=work_factor,
        )

    def hash_password(self, password: str) -> str:
        result: str = self._context.hash(password)
        return result

    def verify_password(self, plain: str, hashed: str) -> bool:
        try:
            return bool(self._context.verify(plain, hashed))
        except (ValueError, TypeError):
            # Unrecognised or corrupt stored hash
            return False

    def needs_rehash(self, hashed: str) -> bool:
        try:
            return bool(self._context.needs_update(hashed))
        except (ValueError, TypeError):
            return False


class JWTTokenCodec:
    """Issues and verifies HS256 identity tokens carrying ``sub``, ``email``, ``iat``, ``exp``."""

    def __init__(
        self,
        secret: str,
        *,
        ttl_minutes: int,
        algorithm: str = "HS256",
        clock: ClockPort | None = None,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(minutes=ttl_minutes)
        self._algorithm = algorithm
        self._clock = clock if clock is not None else SystemClock()

    def issue(self, subject_id: str, email: str) -> str:
        issued_at = self._clock.now_utc()
        claims: dict[str, Any] = {
            "sub": subject_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        encoded: str = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return encoded

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature and expiry and return the decoded claims.

        Raises InvalidTokenError for every failure: bad encoding, wrong signature,
        missing claims, or an expiry at or before the current time.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # Expiry is checked below against the injected clock.
                options={
                    "verify_exp": False,
                    "require_iat": True,
                    "require_sub": True,
                },
            )
        except JOSEError as e:
            raise InvalidTokenError() from e

        sub = payload.get("sub")
        email = payload.get("email")
        iat = payload.get("iat")
        exp = payload.get("exp")
        if not (
            isinstance(sub, str)
            and isinstance(email, str)
            and isinstance(iat, int | float)
            and isinstance(exp, int | float)
        ):
            raise InvalidTokenError()

        expires_at = datetime.fromtimestamp(exp, UTC)
        if expires_at <= self._clock.now_utc():
            raise InvalidTokenError()

        return TokenClaims(
            subject_id=sub,
            email=email,
            issued_at=datetime.fromtimestamp(iat, UTC),
            expires_at=expires_at,
        )
