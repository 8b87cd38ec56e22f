"""
Startup configuration.

Environment settings and the rules file are read once and merged into a frozen
AppConfig, which is then passed explicitly to everything that needs it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from src.components.uploads.models import UploadEndpoint, UploadPolicy
from src.rules.loader import load_rules
from src.rules.models import Rules, StorageBackend

DEV_SECRET = "dev-secret-unsafe"


class ConfigError(ValueError):
    """Raised when the configuration cannot be used to start the service."""


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.env = os.environ.get("CLINIC_ENV", "development")
        self.data_dir = Path(os.environ.get("CLINIC_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "clinic.db")
        self.rules_path = Path(os.environ.get("CLINIC_RULES_PATH", self.base_dir / "rules.yaml"))
        self.jwt_secret = os.environ.get("CLINIC_JWT_SECRET", "")
        self.jwt_expire_minutes = _optional_int(os.environ.get("CLINIC_JWT_EXPIRE_MINUTES"))
        self.storage_backend = os.environ.get("CLINIC_STORAGE_BACKEND") or None
        self.cloudinary_cloud_name = os.environ.get("CLOUDINARY_CLOUD_NAME", "")
        self.cloudinary_api_key = os.environ.get("CLOUDINARY_API_KEY", "")
        self.cloudinary_api_secret = os.environ.get("CLOUDINARY_API_SECRET", "")
        self.cors_origins = [
            origin.strip()
            for origin in os.environ.get("CLINIC_CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]
        self.log_level = os.environ.get("CLINIC_LOG_LEVEL", "INFO")


def _optional_int(raw: str | None) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"Expected an integer, got {raw!r}") from e


# --- Config ---


@dataclass(frozen=True)
class AuthConfig:
    jwt_secret: str
    jwt_algorithm: str
    token_ttl_minutes: int
    password_work_factor: int
    password_min_length: int


@dataclass(frozen=True)
class CloudinaryConfig:
    cloud_name: str
    api_key: str
    api_secret: str
    api_base_url: str
    resource_type: str
    transformation: str
    timeout_seconds: float


@dataclass(frozen=True)
class StorageConfig:
    backend: StorageBackend
    local_dir: Path
    public_prefix: str
    cloudinary: CloudinaryConfig | None = None


@dataclass(frozen=True)
class AppConfig:
    env: str
    db_path: str
    auth: AuthConfig
    upload_endpoints: Mapping[str, UploadEndpoint]
    storage: StorageConfig
    cors_origins: tuple[str, ...] = ()
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def build_upload_endpoints(rules: Rules) -> Mapping[str, UploadEndpoint]:
    policies = {
        name: UploadPolicy(
            name=name,
            allowed_mime_types=frozenset(p.allowed_mime_types),
            max_upload_bytes=p.max_upload_bytes,
        )
        for name, p in rules.uploads.policies.items()
    }
    endpoints = {
        name: UploadEndpoint(
            name=name,
            field=e.field,
            folder=e.folder,
            policy=policies[e.policy],
        )
        for name, e in rules.uploads.endpoints.items()
    }
    return MappingProxyType(endpoints)


def build_app_config(settings: Settings, rules: Rules) -> AppConfig:
    """Merge environment settings over the rules file. Env wins for token lifetime."""
    tokens = rules.auth.tokens
    hashing = rules.auth.password_hashing

    auth = AuthConfig(
        jwt_secret=settings.jwt_secret or DEV_SECRET,
        jwt_algorithm=tokens.algorithm,
        token_ttl_minutes=settings.jwt_expire_minutes or tokens.ttl_minutes,
        password_work_factor=hashing.work_factor,
        password_min_length=hashing.min_length,
    )

    backend = settings.storage_backend or rules.storage.default_backend
    if backend not in ("local", "cloudinary"):
        raise ConfigError(f"Unknown storage backend: {backend}")

    cloudinary = None
    if backend == "cloudinary":
        remote = rules.storage.remote
        cloudinary = CloudinaryConfig(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            api_base_url=remote.api_base_url,
            resource_type=remote.resource_type,
            transformation=remote.transformation,
            timeout_seconds=remote.timeout_seconds,
        )

    local_dir = Path(rules.storage.local.directory)
    if not local_dir.is_absolute():
        local_dir = settings.data_dir / local_dir

    storage = StorageConfig(
        backend=backend,  # type: ignore[arg-type]
        local_dir=local_dir,
        public_prefix=rules.storage.local.public_prefix.rstrip("/"),
        cloudinary=cloudinary,
    )

    return AppConfig(
        env=settings.env,
        db_path=settings.db_path,
        auth=auth,
        upload_endpoints=build_upload_endpoints(rules),
        storage=storage,
        cors_origins=tuple(settings.cors_origins),
        log_level=settings.log_level,
    )


def validate_app_config(config: AppConfig) -> None:
    """
    Validate operational requirements before startup.
    Raises ConfigError listing every problem found.
    """
    problems: list[str] = []

    if config.is_production and config.auth.jwt_secret == DEV_SECRET:
        problems.append("CLINIC_JWT_SECRET must be set in production")

    if config.storage.backend == "cloudinary":
        c = config.storage.cloudinary
        if c is None or not (c.cloud_name and c.api_key and c.api_secret):
            problems.append(
                "Cloudinary backend requires CLOUDINARY_CLOUD_NAME, "
                "CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET"
            )

    if not config.upload_endpoints:
        problems.append("No upload endpoints configured")

    if problems:
        raise ConfigError("; ".join(problems))


def load_app_config(settings: Settings | None = None) -> AppConfig:
    """Read env + rules file, build and validate the config. Called once at startup."""
    settings = settings or Settings()
    config = build_app_config(settings, load_rules(settings.rules_path))
    validate_app_config(config)
    return config
