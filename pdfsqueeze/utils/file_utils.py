from pathlib import PurePosixPath, PureWindowsPath
from typing import Optional
from urllib.parse import quote

from pdfsqueeze.core.errors import PayloadTooLargeError, ValidationError

PDF_SIGNATURE = b"%PDF-"
_SIGNATURE_WINDOW = 1024


def ensure_pdf(filename: Optional[str], content_type: Optional[str] = None) -> None:
    """التحقق من أن الملف المرفوع هو PDF من خلال الامتداد أو نوع المحتوى."""
    name = (filename or "").lower()
    content_type = (content_type or "").lower()
    if not name.endswith(".pdf") and not content_type.endswith("pdf"):
        raise ValidationError("Only PDF files are accepted.")


def ensure_pdf_bytes(data: bytes) -> None:
    if not data:
        raise ValidationError("No file uploaded.")
    # بعض الملفات تسبق التوقيع ببايتات زائدة، ويقبلها قارئو PDF ضمن أول كيلوبايت
    if PDF_SIGNATURE not in data[:_SIGNATURE_WINDOW]:
        raise ValidationError("The uploaded file is not a valid PDF.")


def ensure_size(size: int, limit: int) -> None:
    if size > limit:
        raise PayloadTooLargeError(size, limit)


def derive_output_filename(filename: Optional[str], suffix: str = "_compressed") -> str:
    """اشتقاق اسم الناتج بصيغة <الاسم>_compressed.pdf."""
    name = PureWindowsPath(PurePosixPath(filename or "").name).name.strip()
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    name = name.strip() or "file"
    return f"{name}{suffix}.pdf"


def content_disposition(filename: str) -> str:
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_").replace('"', "_")
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
