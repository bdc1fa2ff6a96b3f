from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """إعدادات خدمة الضغط العامة مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "PDF Squeeze API"
    app_version: str = "0.1.0"

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    temp_dir: Optional[Path] = None

    # حدود الطلب
    max_upload_bytes: int = 50 * 1024 * 1024
    request_timeout: float = 60.0

    # المحرك الأصلي (Ghostscript)
    native_timeout: float = 55.0
    probe_timeout: float = 3.0
    native_candidates: list[str] = Field(
        default_factory=lambda: [
            "gs",
            "/usr/local/bin/gs",
            "/usr/bin/gs",
            "/opt/homebrew/bin/gs",
            "/opt/local/bin/gs",
        ]
    )
    native_compatibility_level: str = "1.5"
    fallback_on_native_failure: bool = False

    # الجلب من التخزين الوسيط
    fetch_attempts: int = 4
    fetch_delay: float = 1.2
    fetch_timeout: float = 20.0
    blob_read_write_token: Optional[str] = None
    blob_api_url: str = "https://blob.vercel-storage.com"

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # DEBUG يُظهر انتقالات مراحل الضغط
    log_level: str = "INFO"

    def configure_paths(self) -> None:
        """تهيئة مجلد الملفات المؤقتة وإنشاؤه في حال غيابه."""
        self.temp_dir = (self.temp_dir or (self.base_dir / "tmp")).resolve()
        self.temp_dir.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
