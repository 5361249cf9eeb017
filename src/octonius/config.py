"""Runtime configuration for the Octonius API."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Optional

from .env import load_env

__all__ = ["Settings", "StorageConfig", "parse_duration"]

DEFAULT_DATABASE_URL = "sqlite:///./octonius.db"
DEFAULT_CORS_ORIGINS = ("http://localhost:4200", "http://127.0.0.1:4200")

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str | int) -> int:
    """Convert ``"15m"``, ``"7d"``, ``"3600"`` style durations to seconds."""

    if isinstance(value, int):
        return value
    match = _DURATION_RE.match(value.lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


@dataclass(slots=True)
class StorageConfig:
    """S3 호환 오브젝트 스토리지 설정."""

    bucket_name: str
    region: str = "us-east-1"
    # AWS 외의 S3 호환 엔드포인트 (MinIO, R2 등)
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    # CloudFront 등 공개 배포 도메인
    cdn_base_url: Optional[str] = None
    upload_url_expiry: int = 900
    download_url_expiry: int = 3600

    @classmethod
    def from_env(cls) -> Optional[StorageConfig]:
        """Return the storage config, or ``None`` when no bucket is configured."""
        bucket_name = os.getenv("AWS_S3_BUCKET_NAME")
        if not bucket_name:
            return None
        return cls(
            bucket_name=bucket_name,
            region=os.getenv("AWS_REGION", "us-east-1"),
            endpoint_url=os.getenv("AWS_S3_ENDPOINT_URL") or None,
            access_key_id=os.getenv("AWS_ACCESS_KEY_ID") or None,
            secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY") or None,
            cdn_base_url=os.getenv("CDN_BASE_URL") or None,
            upload_url_expiry=int(os.getenv("S3_UPLOAD_URL_EXPIRY", "900")),
            download_url_expiry=int(os.getenv("S3_DOWNLOAD_URL_EXPIRY", "3600")),
        )


@dataclass(slots=True)
class Settings:
    """Octonius API settings."""

    database_url: str = DEFAULT_DATABASE_URL
    jwt_access_key: str = "dev-access-secret"
    jwt_refresh_key: str = "dev-refresh-secret"
    jwt_algorithm: str = "HS256"
    access_token_ttl: int = 15 * 60
    refresh_token_ttl: int = 7 * 86400
    otp_ttl: int = 300
    invitation_ttl_days: int = 7
    domain: str = "localhost:4200"
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    resend_api_key: Optional[str] = None
    resend_from_email: str = "Octonius <no-reply@octonius.com>"
    environment: str = "development"
    log_level: str = "INFO"
    version: str = "0.1.0"
    storage: Optional[StorageConfig] = field(default=None)

    @classmethod
    def from_env(cls) -> Settings:
        load_env()
        database_url = (
            os.getenv("OCTONIUS_DATABASE_URL")
            or os.getenv("DATABASE_URL")
            or DEFAULT_DATABASE_URL
        )
        environment = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development"))
        access_key = os.getenv("JWT_ACCESS_KEY")
        refresh_key = os.getenv("JWT_REFRESH_KEY")
        if environment == "production" and not (access_key and refresh_key):
            raise ValueError(
                "JWT secrets required in production: set JWT_ACCESS_KEY and JWT_REFRESH_KEY"
            )
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            database_url=database_url,
            jwt_access_key=access_key or "dev-access-secret",
            jwt_refresh_key=refresh_key or "dev-refresh-secret",
            access_token_ttl=parse_duration(os.getenv("JWT_ACCESS_TIME", "15m")),
            refresh_token_ttl=parse_duration(os.getenv("JWT_REFRESH_TIME", "7d")),
            otp_ttl=parse_duration(os.getenv("OTP_TTL", "300")),
            invitation_ttl_days=int(os.getenv("INVITATION_TTL_DAYS", "7")),
            domain=os.getenv("DOMAIN", "localhost:4200"),
            cors_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                if origins
                else DEFAULT_CORS_ORIGINS
            ),
            resend_api_key=os.getenv("RESEND_API_KEY") or None,
            resend_from_email=os.getenv(
                "RESEND_FROM_EMAIL", "Octonius <no-reply@octonius.com>"
            ),
            environment=environment,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            version=os.getenv("APP_VERSION", "0.1.0"),
            storage=StorageConfig.from_env(),
        )
