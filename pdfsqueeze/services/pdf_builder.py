from __future__ import annotations

from dataclasses import dataclass
from typing import List

import fitz  # PyMuPDF


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    width: int
    height: int


@dataclass(frozen=True)
class OutputPage:
    """صفحة منشأة داخل المستند الناتج ولم تُضف بعد إلى شجرة الصفحات."""

    width: float
    height: float
    image_xref: int
    image_name: str = "Im0"

    @property
    def content(self) -> bytes:
        # رسم الصورة مكبّرة لتغطي الصفحة بالكامل
        return f"q {_num(self.width)} 0 0 {_num(self.height)} 0 0 cm /{self.image_name} Do Q".encode("ascii")


def _num(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text or "0"


class OutputDocumentBuilder:
    """بناء مستند PDF جديد صفحة بصفحة من صور JPEG جاهزة.

    الإنشاء والإدراج خطوتان منفصلتان: الصفحة التي تُنشأ عبر ``create_page``
    لا تظهر في الناتج إلا بعد تمريرها إلى ``insert_page``.
    """

    def __init__(self) -> None:
        self._document = fitz.open()
        self._pages: List[OutputPage] = []

    def __enter__(self) -> "OutputDocumentBuilder":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def add_image(self, image: EncodedImage) -> int:
        """تسجيل صورة JPEG ككائن XObject بمرشح DCTDecode وإرجاع رقم xref."""
        xref = self._document.get_new_xref()
        self._document.update_object(
            xref,
            "<< /Type /XObject /Subtype /Image"
            f" /Width {image.width} /Height {image.height}"
            " /ColorSpace /DeviceRGB /BitsPerComponent 8 >>",
        )
        # يحذف update_stream المرشح عند عدم الضغط، لذا يُضبط DCTDecode بعده
        self._document.update_stream(xref, image.data, compress=False)
        self._document.xref_set_key(xref, "Filter", "/DCTDecode")
        return xref

    def create_page(self, width: float, height: float, image_xref: int) -> OutputPage:
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid page size {width}x{height}")
        return OutputPage(width=width, height=height, image_xref=image_xref)

    def insert_page(self, page: OutputPage) -> None:
        self._pages.append(page)

    def finalize(self) -> bytes:
        """إنشاء شجرة الصفحات بالترتيب ثم حفظ المستند مع ضغط التدفقات.

        لا يُستخدم garbage هنا: الكائنات المضافة عبر xref قد لا يتعرّف عليها
        تحليل الوصول فيحذفها ويُفسد الناتج.
        """
        if not self._pages:
            raise ValueError("cannot serialize a document without pages")

        for page in self._pages:
            self._materialize(page)

        return self._document.tobytes(garbage=0, deflate=True)

    def close(self) -> None:
        self._document.close()

    def _materialize(self, page: OutputPage) -> None:
        target = self._document.new_page(-1, width=page.width, height=page.height)
        self._document.xref_set_key(
            target.xref,
            "Resources",
            f"<< /XObject << /{page.image_name} {page.image_xref} 0 R >> >>",
        )

        contents = target.get_contents()
        if contents:
            self._document.update_stream(contents[0], page.content)
        else:
            xref = self._document.get_new_xref()
            self._document.update_object(xref, "<< >>")
            self._document.update_stream(xref, page.content)
            target.set_contents(xref)
