from __future__ import annotations

from http import HTTPStatus
from typing import Optional


class CompressionError(Exception):
    """الخطأ الأساسي لكل الإخفاقات التي تعبر حدود محرك الضغط.

    تحمل الرسالة الداخلية (للسجلات) ورسالة آمنة للعميل مع رمز الحالة المناسب.
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "Failed to compress the PDF. The file may be corrupted or unsupported."

    def __init__(self, message: str | None = None, *, user_message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message
        # مرحلة خط الضغط التي وقع فيها الخطأ، إن عُرفت
        self.stage: Optional[str] = None


class ValidationError(CompressionError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Only PDF files are accepted."

    def __init__(self, message: str | None = None) -> None:
        # أخطاء التحقق قابلة للإصلاح من جهة العميل، فنعرض الرسالة كما هي
        super().__init__(message, user_message=message)


class PayloadTooLargeError(CompressionError):
    status_code = HTTPStatus.REQUEST_ENTITY_TOO_LARGE
    default_message = "File exceeds the 50 MB limit."

    def __init__(self, size: int, limit: int) -> None:
        limit_mb = limit // (1024 * 1024)
        super().__init__(
            f"payload of {size} bytes exceeds the {limit} byte ceiling",
            user_message=f"File exceeds the {limit_mb} MB limit.",
        )
        self.size = size
        self.limit = limit


class RetrievalError(CompressionError):
    status_code = HTTPStatus.BAD_GATEWAY
    default_message = "Could not retrieve the uploaded file. Please try again."

    def __init__(self, message: str, *, attempts: int = 0, cause: Optional[BaseException | str] = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.cause = cause


class TranscodeError(CompressionError):
    default_message = "Failed to compress the PDF. The file may be corrupted or unsupported."
    timeout_message = "Compression timed out. Try a smaller file or a different level."

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message, user_message=self.timeout_message if timed_out else None)
        self.timed_out = timed_out
        if timed_out:
            self.status_code = HTTPStatus.GATEWAY_TIMEOUT


class DecodeError(CompressionError):
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    default_message = "Failed to read the PDF. The file may be corrupted or unsupported."


class EncryptedDocumentError(CompressionError):
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    default_message = "Encrypted PDFs are not supported. Please remove the password first."


class InternalCompressionError(CompressionError):
    pass


_TIMEOUT_MARKERS = ("timed out", "timeout")
_ENCRYPTION_MARKERS = ("encrypt", "password")
_CORRUPTION_MARKERS = ("corrupt", "damaged", "broken", "format error", "syntax error", "cannot open", "no objects found")


def classify_message(message: str) -> Optional[CompressionError]:
    """مطابقة نص خطأ (مثل مخرجات stderr لأداة خارجية) مع أنماط التشفير والتلف.

    تعيد None إذا لم يطابق النص أي نمط معروف.
    """
    text = message.lower()
    if any(marker in text for marker in _ENCRYPTION_MARKERS):
        return EncryptedDocumentError(message)
    if any(marker in text for marker in _CORRUPTION_MARKERS):
        return DecodeError(message)
    return None


def classify_failure(exc: BaseException) -> CompressionError:
    """تحويل أي استثناء إلى أحد أصناف التصنيف المعتمد بحسب نص السبب."""
    if isinstance(exc, CompressionError):
        return exc

    text = str(exc).lower()
    if isinstance(exc, TimeoutError) or any(marker in text for marker in _TIMEOUT_MARKERS):
        error: Optional[CompressionError] = TranscodeError(str(exc) or "operation timed out", timed_out=True)
    else:
        error = classify_message(str(exc))
    if error is None:
        error = InternalCompressionError(f"{type(exc).__name__}: {exc}")
    error.__cause__ = exc
    return error
