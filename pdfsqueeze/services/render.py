from __future__ import annotations

import fitz  # PyMuPDF

from pdfsqueeze.core.errors import DecodeError, EncryptedDocumentError
from pdfsqueeze.core.logging import configure_logging
from pdfsqueeze.models.common import CompressionLevel, EngineName
from pdfsqueeze.services.levels import LevelSettings, get_level_settings
from pdfsqueeze.services.pdf_builder import EncodedImage, OutputDocumentBuilder
from pdfsqueeze.services.transcoder import Transcoder

logger = configure_logging()


def open_document(document: bytes) -> fitz.Document:
    """فتح بايتات PDF مع تحويل أخطاء القراءة والتشفير إلى أصناف الأخطاء المعتمدة."""
    try:
        source = fitz.open(stream=document, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise DecodeError(f"unreadable PDF: {exc}") from exc

    if source.needs_pass:
        source.close()
        raise EncryptedDocumentError("document is encrypted and requires a password")

    if source.page_count == 0:
        source.close()
        raise DecodeError("document has no pages")

    return source


def encode_page(page: fitz.Page, settings: LevelSettings) -> EncodedImage:
    """تحويل صفحة إلى JPEG مع تحرير بيانات البكسل قبل العودة.

    لا يبقى في الذاكرة سوى مخزن بكسلات صفحة واحدة في كل مرة.
    """
    pixmap = page.get_pixmap(
        matrix=fitz.Matrix(settings.scale, settings.scale),
        colorspace=fitz.csRGB,
        alpha=False,
    )
    image = EncodedImage(
        data=pixmap.tobytes("jpeg", jpg_quality=settings.quality),
        width=pixmap.width,
        height=pixmap.height,
    )
    del pixmap
    return image


class PageRenderTranscoder(Transcoder):
    """إعادة رسم كل صفحة كصورة JPEG واحدة داخل مستند جديد، دون أي برنامج خارجي."""

    engine = EngineName.mupdf

    def transcode(self, document: bytes, level: CompressionLevel) -> bytes:
        settings = get_level_settings(level)
        source = open_document(document)
        page_count = source.page_count

        try:
            with OutputDocumentBuilder() as builder:
                for index in range(page_count):
                    page = source.load_page(index)
                    width, height = page.rect.width, page.rect.height

                    image = encode_page(page, settings)
                    image_xref = builder.add_image(image)
                    output_page = builder.create_page(width, height, image_xref)
                    builder.insert_page(output_page)

                    logger.debug(
                        "صفحة %s: %sx%s بكسل، %s بايت.", index + 1, image.width, image.height, len(image.data)
                    )
                    del page, image

                output = builder.finalize()
        except (RuntimeError, ValueError) as exc:
            raise DecodeError(f"failed to render PDF: {exc}") from exc
        finally:
            source.close()

        logger.info(
            "اكتمل الرسم بـ MuPDF: %s صفحة، جودة %s، مقياس %s.",
            page_count,
            settings.quality,
            settings.scale,
        )
        return output
