"""Application configuration from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    garden_env: str = "development"
    garden_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Classifier (CLIP on Replicate)
    replicate_api_token: str = ""
    replicate_base_url: str = "https://api.replicate.com/v1"
    classifier_model_version: str = (
        "566ab1f111e526640c5154e712d4d54961414278f89d36590f1425badc763ecb"
    )
    classifier_timeout_s: float = 60.0

    # Storage
    storage_backend: str = "memory"  # "memory" | "supabase"
    supabase_url: str = ""
    supabase_service_key: str = ""
    storage_bucket: str = "garden"
    storage_cache_control: str = "31536000"

    # Submissions from these origins are stored already flagged
    premoderated_identities: list[str] = ["unknown"]

    # Client-side fast-path counter (CLI)
    local_quota_path: Path = Path.home() / ".garden" / "quota.json"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
