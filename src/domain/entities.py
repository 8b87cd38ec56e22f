from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- User & Auth ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    display_name: str = ""
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Identity(BaseModel):
    """The authenticated caller, as decoded from a verified token."""

    id: str
    email: str


class TokenClaims(BaseModel):
    subject_id: str
    email: str
    issued_at: datetime
    expires_at: datetime

    def to_identity(self) -> Identity:
        return Identity(id=self.subject_id, email=self.email)
