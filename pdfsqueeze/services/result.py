from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from pdfsqueeze.models.common import EngineName
from pdfsqueeze.services.compression_service import EngineResult
from pdfsqueeze.utils.file_utils import content_disposition, derive_output_filename


@dataclass(frozen=True)
class CompressionResult:
    data: bytes
    filename: str
    engine: EngineName
    original_size: int
    compressed_size: int

    @property
    def reduction_bytes(self) -> int:
        return max(0, self.original_size - self.compressed_size)

    @property
    def reduction_percent(self) -> float:
        if not self.original_size:
            return 0.0
        return round((self.reduction_bytes / self.original_size) * 100, 2)

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Disposition": content_disposition(self.filename),
            "X-Original-Size": str(self.original_size),
            "X-Compressed-Size": str(self.compressed_size),
            "X-Engine": self.engine.value,
            "Cache-Control": "no-store",
        }


def assemble_result(result: EngineResult, original_filename: Optional[str]) -> CompressionResult:
    """تجهيز الناتج مع بيانات الحجم والمحرك لطبقة الاستجابة."""
    return CompressionResult(
        data=result.data,
        filename=derive_output_filename(original_filename),
        engine=result.engine,
        original_size=result.original_size,
        compressed_size=result.final_size,
    )
