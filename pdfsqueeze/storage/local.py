from pathlib import Path
from typing import Iterable, Optional
from uuid import uuid4

from pdfsqueeze.core.config import Settings, get_settings


class LocalStorage:
    """إدارة الملفات المؤقتة الخاصة بكل طلب ضغط داخل مجلد العمل."""

    def __init__(self, settings: Optional[Settings] = None, base_dir: Optional[Path] = None) -> None:
        settings = settings or get_settings()
        if settings.temp_dir is None:
            settings.configure_paths()
        self.temp_dir = Path(base_dir or settings.temp_dir)
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _generate_filename(prefix: str, suffix: str, token: str) -> str:
        suffix = suffix if suffix.startswith(".") else f".{suffix.lstrip('.')}"
        return f"{prefix}-{token}{suffix}"

    def temp_paths(self, *roles: str, suffix: str = ".pdf") -> list[Path]:
        """حجز مسارات فريدة تشترك في معرف عشوائي واحد (مثل in و out)."""
        token = uuid4().hex
        return [self.temp_dir / self._generate_filename(f"pdfsqueeze-{role}", suffix, token) for role in roles]

    def save_bytes(self, data: bytes, path: Path) -> Path:
        path.write_bytes(data)
        return path

    def cleanup(self, paths: Iterable[Path]) -> None:
        for path in paths:
            if path and path.exists():
                path.unlink(missing_ok=True)
