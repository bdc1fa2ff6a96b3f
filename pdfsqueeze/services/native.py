from __future__ import annotations

import subprocess
from typing import Optional

from pdfsqueeze.core.config import Settings, get_settings
from pdfsqueeze.core.errors import TranscodeError, classify_message
from pdfsqueeze.core.logging import configure_logging
from pdfsqueeze.models.common import CompressionLevel, EngineName
from pdfsqueeze.services.levels import get_level_settings
from pdfsqueeze.services.transcoder import Transcoder
from pdfsqueeze.storage.local import LocalStorage

logger = configure_logging()


def find_native_transcoder(settings: Optional[Settings] = None) -> Optional[str]:
    """البحث عن أول ملف Ghostscript قابل للتشغيل ضمن المسارات المعروفة.

    غياب Ghostscript حالة طبيعية في بيئة النشر الأساسية، لذا تعيد الدالة None ولا ترفع أي استثناء.
    """
    settings = settings or get_settings()

    for candidate in settings.native_candidates:
        try:
            subprocess.run(
                [candidate, "--version"],
                check=True,
                timeout=settings.probe_timeout,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, subprocess.SubprocessError):
            continue
        logger.info("تم العثور على Ghostscript: %s", candidate)
        return candidate

    logger.info("لا يتوفر Ghostscript؛ سيتم استخدام محرك MuPDF.")
    return None


class NativeTranscoder(Transcoder):
    """ضغط PDF عبر Ghostscript في عملية منفصلة."""

    engine = EngineName.ghostscript

    def __init__(
        self,
        binary: str,
        settings: Optional[Settings] = None,
        storage: Optional[LocalStorage] = None,
    ) -> None:
        self.binary = binary
        self.settings = settings or get_settings()
        self.storage = storage or LocalStorage(self.settings)

    def build_command(self, input_path: str, output_path: str, level: CompressionLevel) -> list[str]:
        preset = get_level_settings(level).native_preset
        return [
            self.binary,
            "-sDEVICE=pdfwrite",
            "-dNOPAUSE",
            "-dBATCH",
            "-dQUIET",
            f"-dPDFSETTINGS={preset}",
            f"-dCompatibilityLevel={self.settings.native_compatibility_level}",
            f"-sOutputFile={output_path}",
            input_path,
        ]

    def transcode(self, document: bytes, level: CompressionLevel) -> bytes:
        input_path, output_path = self.storage.temp_paths("in", "out")
        try:
            self.storage.save_bytes(document, input_path)
            command = self.build_command(str(input_path), str(output_path), level)
            try:
                subprocess.run(
                    command,
                    check=True,
                    timeout=self.settings.native_timeout,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                )
            except subprocess.TimeoutExpired as exc:
                raise TranscodeError(
                    f"Ghostscript timed out after {self.settings.native_timeout:g}s",
                    timed_out=True,
                ) from exc
            except subprocess.CalledProcessError as exc:
                stderr = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
                message = f"Ghostscript exited with status {exc.returncode}: {stderr}"
                # Ghostscript يبلغ عن الملفات المحمية أو التالفة عبر stderr فقط
                raise (classify_message(message) or TranscodeError(message)) from exc
            except OSError as exc:
                raise TranscodeError(f"Ghostscript could not be started: {exc}") from exc

            if not output_path.exists() or output_path.stat().st_size == 0:
                raise TranscodeError("Ghostscript produced no output file")

            return output_path.read_bytes()
        finally:
            self.storage.cleanup([input_path, output_path])
