from __future__ import annotations

import os


class Settings:
    media_registry_path: str | None = os.getenv("MEDIA_REGISTRY_PATH")
    match_image_mime_prefix: bool = os.getenv("MATCH_IMAGE_MIME_PREFIX", "true").lower() == "true"

    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(12 * 1024 * 1024)))
    max_image_pixels: int = int(os.getenv("MAX_IMAGE_PIXELS", str(40_000_000)))
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "120"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
