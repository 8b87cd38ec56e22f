from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from src.adapters.auth.crypto import JWTTokenCodec, PasslibPasswordHasher
from src.adapters.clock import SystemClock
from src.adapters.cloudinary_storage import CloudinaryMediaStore
from src.adapters.fs.filestore import LocalMediaStore
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteUserRepo
from src.app_shell.config import AppConfig
from src.components.auth.ports import (
    ClockPort,
    PasswordHasherPort,
    TokenCodecPort,
    UserRepoPort,
)
from src.core.ports.storage import MediaStoragePort


def build_media_storage(config: AppConfig) -> MediaStoragePort:
    storage = config.storage
    if storage.backend == "cloudinary":
        assert storage.cloudinary is not None
        return CloudinaryMediaStore(storage.cloudinary)
    return LocalMediaStore(storage.local_dir, storage.public_prefix)


@dataclass
class ServiceContext:
    config: AppConfig
    user_repo: UserRepoPort
    hasher: PasswordHasherPort
    tokens: TokenCodecPort
    media_storage: MediaStoragePort
    clock: ClockPort

    @classmethod
    def create(
        cls,
        config: AppConfig,
        *,
        clock: ClockPort | None = None,
        media_storage: MediaStoragePort | None = None,
    ) -> ServiceContext:
        clock = clock or SystemClock()

        # Schema is created on demand
        Path(config.db_path).parent.mkdir(parents=True, exist_ok=True)
        SQLiteMigrator(config.db_path).run_migrations()

        return cls(
            config=config,
            user_repo=SQLiteUserRepo(config.db_path),
            hasher=PasslibPasswordHasher(config.auth.password_work_factor),
            tokens=JWTTokenCodec(
                config.auth.jwt_secret,
                ttl_minutes=config.auth.token_ttl_minutes,
                algorithm=config.auth.jwt_algorithm,
                clock=clock,
            ),
            media_storage=media_storage or build_media_storage(config),
            clock=clock,
        )
