from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities import User


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Auth ---
class SignupRequest(BaseModel):
    email: str = ""
    password: str = ""
    name: str | None = None


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class ProfileUpdateRequest(CamelModel):
    name: str | None = None
    email: str | None = None
    current_password: str | None = Field(default=None, alias="currentPassword")
    new_password: str | None = Field(default=None, alias="newPassword")


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    created_at: datetime = Field(alias="createdAt")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.display_name,
            created_at=user.created_at,
        )


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


class ProfileResponse(BaseModel):
    message: str
    user: UserResponse


# --- Uploads ---
class UploadResponse(CamelModel):
    message: str
    image_url: str = Field(alias="imageUrl")
    public_id: str | None = Field(default=None, alias="publicId")
    resource_type: str | None = Field(default=None, alias="resourceType")


class DeleteUploadRequest(CamelModel):
    public_id: str = Field(default="", alias="publicId")
    resource_type: str | None = Field(default=None, alias="resourceType")


class DeleteUploadResponse(BaseModel):
    message: str
    deleted: bool
