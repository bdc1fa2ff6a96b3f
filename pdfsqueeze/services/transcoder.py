from __future__ import annotations

from abc import ABC, abstractmethod

from pdfsqueeze.models.common import CompressionLevel, EngineName


class Transcoder(ABC):
    """قدرة موحدة لتحويل مستند PDF إلى تمثيل أصغر."""

    engine: EngineName

    @abstractmethod
    def transcode(self, document: bytes, level: CompressionLevel) -> bytes:
        """إرجاع بايتات مستند جديد دون تعديل المدخل."""
