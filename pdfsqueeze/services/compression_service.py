from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from pdfsqueeze.core.config import Settings, get_settings
from pdfsqueeze.core.errors import CompressionError, TranscodeError, classify_failure
from pdfsqueeze.core.logging import configure_logging
from pdfsqueeze.models.common import CompressionLevel, EngineName
from pdfsqueeze.services.levels import resolve_level
from pdfsqueeze.services.native import NativeTranscoder, find_native_transcoder
from pdfsqueeze.services.render import PageRenderTranscoder
from pdfsqueeze.services.transcoder import Transcoder
from pdfsqueeze.storage.local import LocalStorage

logger = configure_logging()


class Stage(str, Enum):
    idle = "idle"
    engine_selection = "engine_selection"
    transcoding = "transcoding"
    size_check = "size_check"
    done = "done"
    error = "error"


@dataclass(frozen=True)
class EngineResult:
    data: bytes
    engine: EngineName
    original_size: int
    final_size: int


class CompressionService:
    """اختيار محرك الضغط لكل طلب وضمان ألا يكون الناتج أكبر من المدخل."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[LocalStorage] = None,
        probe: Callable[[Settings], Optional[str]] = find_native_transcoder,
    ) -> None:
        self.settings = settings or get_settings()
        self.storage = storage or LocalStorage(self.settings)
        self.probe = probe

    def select_transcoder(self) -> Transcoder:
        # يُعاد الفحص في كل طلب دون تخزين نتيجة عامة
        binary = self.probe(self.settings)
        if binary:
            return NativeTranscoder(binary, settings=self.settings, storage=self.storage)
        return PageRenderTranscoder()

    def compress(self, document: bytes, level: Union[str, CompressionLevel, None] = None) -> EngineResult:
        resolved = resolve_level(level)
        stage = Stage.idle

        try:
            stage = self._advance(stage, Stage.engine_selection)
            transcoder = self.select_transcoder()

            stage = self._advance(stage, Stage.transcoding)
            transcoder, output = self._run(transcoder, document, resolved)
        except Exception as exc:
            error = classify_failure(exc)
            # المرحلة التي فشل فيها الطلب تبقى على الخطأ نفسه
            error.stage = stage
            self._advance(stage, Stage.error)
            if isinstance(exc, CompressionError):
                logger.warning("فشل الضغط في مرحلة %s (%s): %s", stage.value, type(error).__name__, error)
                raise
            logger.exception("خطأ غير مصنف أثناء الضغط في مرحلة %s", stage.value)
            raise error from exc

        stage = self._advance(stage, Stage.size_check)
        original_size = len(document)
        if len(output) >= original_size:
            logger.info(
                "الناتج (%s بايت) ليس أصغر من الأصل (%s بايت)؛ سيُعاد الملف الأصلي.",
                len(output),
                original_size,
            )
            output = document

        self._advance(stage, Stage.done)
        logger.info(
            "اكتمل الضغط بمحرك %s بمستوى %s: %s → %s بايت.",
            transcoder.engine.value,
            resolved.value,
            original_size,
            len(output),
        )
        return EngineResult(
            data=output,
            engine=transcoder.engine,
            original_size=original_size,
            final_size=len(output),
        )

    def _run(self, transcoder: Transcoder, document: bytes, level: CompressionLevel) -> tuple[Transcoder, bytes]:
        try:
            return transcoder, transcoder.transcode(document, level)
        except TranscodeError as exc:
            if not (self.settings.fallback_on_native_failure and isinstance(transcoder, NativeTranscoder)):
                raise
            logger.warning("فشل Ghostscript (%s)؛ إعادة المحاولة بمحرك MuPDF.", exc)
            fallback = PageRenderTranscoder()
            return fallback, fallback.transcode(document, level)

    @staticmethod
    def _advance(current: Stage, target: Stage) -> Stage:
        logger.debug("مرحلة الضغط: %s → %s", current.value, target.value)
        return target
