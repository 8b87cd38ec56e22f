from typing import Literal

from pydantic import BaseModel, Field, model_validator

StorageBackend = Literal["local", "cloudinary"]


class PasswordHashingRules(BaseModel):
    algorithm: Literal["argon2"] = "argon2"
    work_factor: int = Field(default=3, ge=1)
    min_length: int = Field(default=6, ge=1)


class TokenRules(BaseModel):
    algorithm: str = "HS256"
    ttl_minutes: int = Field(default=7 * 24 * 60, gt=0)


class AuthRules(BaseModel):
    password_hashing: PasswordHashingRules = Field(default_factory=PasswordHashingRules)
    tokens: TokenRules = Field(default_factory=TokenRules)


class UploadPolicyRules(BaseModel):
    allowed_mime_types: list[str]
    max_upload_bytes: int = Field(gt=0)


class UploadEndpointRules(BaseModel):
    policy: str
    field: str = "image"
    folder: str


class UploadsRules(BaseModel):
    policies: dict[str, UploadPolicyRules]
    endpoints: dict[str, UploadEndpointRules]

    @model_validator(mode="after")
    def _endpoints_reference_known_policies(self) -> "UploadsRules":
        for name, endpoint in self.endpoints.items():
            if endpoint.policy not in self.policies:
                raise ValueError(
                    f"Upload endpoint '{name}' references unknown policy '{endpoint.policy}'"
                )
        return self


class LocalStorageRules(BaseModel):
    directory: str = "uploads"
    public_prefix: str = "/uploads"


class RemoteStorageRules(BaseModel):
    api_base_url: str = "https://api.cloudinary.com/v1_1"
    resource_type: str = "auto"
    transformation: str = "c_limit,w_1200,h_800/q_auto:good"
    timeout_seconds: float = Field(default=30.0, gt=0)


class StorageRules(BaseModel):
    default_backend: StorageBackend = "local"
    local: LocalStorageRules = Field(default_factory=LocalStorageRules)
    remote: RemoteStorageRules = Field(default_factory=RemoteStorageRules)


class Rules(BaseModel):
    auth: AuthRules = Field(default_factory=AuthRules)
    uploads: UploadsRules
    storage: StorageRules = Field(default_factory=StorageRules)
