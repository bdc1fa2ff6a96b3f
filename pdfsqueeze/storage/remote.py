from __future__ import annotations

from typing import Optional

import requests

from pdfsqueeze.core.config import Settings, get_settings
from pdfsqueeze.core.logging import configure_logging

logger = configure_logging()


class RemoteObjectStore:
    """واجهة حذف الكائنات المؤقتة من التخزين الوسيط بعد استهلاكها."""

    API_VERSION = "7"

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.settings.blob_read_write_token)

    def delete(self, url: str) -> bool:
        """طلب حذف الكائن. لا يرفع استثناءً، فالحذف خطوة تنظيف لا تغيّر نتيجة الضغط."""
        if not self.enabled:
            logger.info("لم يتم ضبط رمز التخزين؛ تخطي حذف الكائن: %s", url)
            return False

        endpoint = f"{self.settings.blob_api_url.rstrip('/')}/delete"
        try:
            response = self.session.post(
                endpoint,
                json={"urls": [url]},
                headers={
                    "authorization": f"Bearer {self.settings.blob_read_write_token}",
                    "x-api-version": self.API_VERSION,
                },
                timeout=self.settings.fetch_timeout,
            )
        except requests.RequestException as exc:
            logger.warning("تعذر حذف الكائن المؤقت %s: %s", url, exc)
            return False

        if not response.ok:
            logger.warning("رفض التخزين حذف الكائن %s (HTTP %s).", url, response.status_code)
            return False

        logger.info("تم حذف الكائن المؤقت: %s", url)
        return True
