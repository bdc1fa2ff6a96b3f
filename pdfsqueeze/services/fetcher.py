from __future__ import annotations

import time
from typing import Callable, Optional

import requests

from pdfsqueeze.core.config import Settings, get_settings
from pdfsqueeze.core.errors import PayloadTooLargeError, RetrievalError
from pdfsqueeze.core.logging import configure_logging

logger = configure_logging()


class RemoteFetcher:
    """جلب بايتات المستند من رابط CDN مع إعادة المحاولة.

    قد يتأخر ظهور الكائن في CDN بعد تأكيد الرفع، لذلك تُعاد المحاولة بعدد ثابت
    وبفاصل زمني ثابت بدلًا من سياسة إعادة المحاولة الضمنية لعميل HTTP.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.sleep = sleep

    @property
    def attempts(self) -> int:
        return max(1, self.settings.fetch_attempts)

    def fetch(self, url: str) -> bytes:
        last_error: Optional[BaseException | str] = None

        for attempt in range(1, self.attempts + 1):
            try:
                response = self.session.get(url, timeout=self.settings.fetch_timeout)
            except requests.RequestException as exc:
                last_error = exc
                logger.warning("محاولة الجلب %s/%s فشلت: %s", attempt, self.attempts, exc)
            else:
                if response.ok:
                    content = response.content
                    self._check_size(content)
                    logger.info("تم جلب الملف في المحاولة %s (%s بايت).", attempt, len(content))
                    return content
                last_error = f"HTTP {response.status_code}"
                logger.warning("محاولة الجلب %s/%s أعادت %s.", attempt, self.attempts, last_error)

            if attempt < self.attempts:
                self.sleep(self.settings.fetch_delay)

        raise RetrievalError(
            f"Failed to retrieve document after {self.attempts} attempts: {last_error}",
            attempts=self.attempts,
            cause=last_error,
        )

    def _check_size(self, content: bytes) -> None:
        if len(content) > self.settings.max_upload_bytes:
            raise PayloadTooLargeError(len(content), self.settings.max_upload_bytes)
