import os
from dataclasses import dataclass
from typing import Optional

PAGE_SIZES = ("letter", "a4")


def env(key: str, default: Optional[str] = None, required: bool = False) -> str:
    value = os.getenv(key)
    if value is None or value == "":
        if required:
            raise RuntimeError(f"Missing required env var: {key}")
        return "" if default is None else str(default)
    return value


@dataclass(frozen=True)
class Settings:
    APP_ENV: str
    SERVICE_PORT: int
    INTERNAL_API_KEY: str
    S3_BUCKET: str
    S3_REGION: str
    S3_ENDPOINT: str
    S3_ACCESS_KEY_ID: str
    S3_SECRET_ACCESS_KEY: str
    S3_PUBLIC_BASE_URL: str
    S3_KEY_PREFIX: str
    IMAGE_FETCH_TIMEOUT_S: float
    IMAGE_FETCH_WORKERS: int
    PAGE_SIZE: str
    CORS_ALLOW_ORIGINS: tuple[str, ...]


def _int_env(key: str, default: str) -> int:
    raw = env(key, default=default)
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"{key} must be an integer") from e


def _float_env(key: str, default: str) -> float:
    raw = env(key, default=default)
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"{key} must be a number") from e


def load_settings() -> Settings:
    app_env = env("APP_ENV", default="development", required=False)
    service_port_raw = env("PORT", default=None, required=False) or env("SERVICE_PORT", default="4000", required=False)
    try:
        service_port = int(service_port_raw)
    except ValueError as e:
        raise RuntimeError("SERVICE_PORT must be an integer") from e

    fetch_timeout_s = _float_env("IMAGE_FETCH_TIMEOUT_S", "30")
    if fetch_timeout_s <= 0:
        raise RuntimeError("IMAGE_FETCH_TIMEOUT_S must be > 0")

    fetch_workers = _int_env("IMAGE_FETCH_WORKERS", "8")
    if fetch_workers < 1:
        raise RuntimeError("IMAGE_FETCH_WORKERS must be >= 1")

    page_size = env("PAGE_SIZE", default="letter").strip().lower()
    if page_size not in PAGE_SIZES:
        raise RuntimeError(f"PAGE_SIZE must be one of: {', '.join(PAGE_SIZES)}")

    cors_origins = tuple(o.strip() for o in env("CORS_ALLOW_ORIGINS", default="*").split(",") if o.strip())

    return Settings(
        APP_ENV=app_env,
        SERVICE_PORT=service_port,
        INTERNAL_API_KEY=env("INTERNAL_API_KEY", default="", required=False),
        S3_BUCKET=env("S3_BUCKET", required=True),
        S3_REGION=env("S3_REGION", required=True),
        S3_ENDPOINT=env("S3_ENDPOINT", default="", required=False),
        S3_ACCESS_KEY_ID=env("S3_ACCESS_KEY_ID", required=True),
        S3_SECRET_ACCESS_KEY=env("S3_SECRET_ACCESS_KEY", required=True),
        S3_PUBLIC_BASE_URL=env("S3_PUBLIC_BASE_URL", default="", required=False).rstrip("/"),
        S3_KEY_PREFIX=env("S3_KEY_PREFIX", default="documents/fabric", required=False).strip("/"),
        IMAGE_FETCH_TIMEOUT_S=fetch_timeout_s,
        IMAGE_FETCH_WORKERS=fetch_workers,
        PAGE_SIZE=page_size,
        CORS_ALLOW_ORIGINS=cors_origins or ("*",),
    )
