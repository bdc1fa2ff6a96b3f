from __future__ import annotations

import random
import stat
import sys
from io import BytesIO
from pathlib import Path
from typing import Callable, Sequence, Tuple

import fitz  # PyMuPDF
import pytest
from reportlab.pdfgen import canvas

from pdfsqueeze.core.config import Settings

PageSize = Tuple[float, float]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    settings = Settings(
        _env_file=None,
        temp_dir=tmp_path / "work",
        native_candidates=[],
        fetch_delay=0,
        native_timeout=5,
        blob_read_write_token=None,
    )
    settings.configure_paths()
    return settings


def build_text_pdf(page_sizes: Sequence[PageSize] = ((612, 792),)) -> bytes:
    """مستند نصي صغير؛ كل صفحة تحمل رقمها."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=page_sizes[0])
    for number, size in enumerate(page_sizes, start=1):
        c.setPageSize(size)
        c.setFont("Helvetica", 14)
        c.drawString(36, size[1] - 48, f"Page {number}")
        c.showPage()
    c.save()
    return buffer.getvalue()


def build_image_pdf(pages: int = 3, size: PageSize = (300, 300), pixels: int = 400, seed: int = 7) -> bytes:
    """مستند ثقيل بالصور: ضوضاء RGB لا يضغطها Flate."""
    rng = random.Random(seed)
    document = fitz.open()
    for _ in range(pages):
        page = document.new_page(width=size[0], height=size[1])
        samples = rng.randbytes(pixels * pixels * 3)
        pixmap = fitz.Pixmap(fitz.csRGB, pixels, pixels, samples, False)
        page.insert_image(page.rect, pixmap=pixmap)
    data = document.tobytes(deflate=True)
    document.close()
    return data


def build_encrypted_pdf() -> bytes:
    document = fitz.open()
    page = document.new_page(width=200, height=200)
    page.insert_text((36, 72), "secret content")
    data = document.tobytes(
        encryption=fitz.PDF_ENCRYPT_AES_256,
        owner_pw="owner-secret",
        user_pw="user-secret",
    )
    document.close()
    return data


@pytest.fixture(scope="session")
def image_pdf() -> bytes:
    return build_image_pdf()


@pytest.fixture(scope="session")
def text_pdf() -> bytes:
    return build_text_pdf()


@pytest.fixture(scope="session")
def encrypted_pdf() -> bytes:
    return build_encrypted_pdf()


_FAKE_GS = """#!/bin/sh
if [ "$1" = "--version" ]; then
  echo "10.02.1"
  exit 0
fi
out=""
last=""
for arg in "$@"; do
  case "$arg" in
    -sOutputFile=*) out="${arg#-sOutputFile=}" ;;
  esac
  last="$arg"
done
echo "$@" > "$(dirname "$0")/last-args.txt"
%(body)s
"""


@pytest.fixture
def fake_gs(tmp_path: Path) -> Callable[[str], str]:
    """إنشاء ملف تنفيذي يحاكي Ghostscript بسلوك محدد."""
    if sys.platform.startswith("win"):
        pytest.skip("shell scripts are not executable on Windows")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def factory(body: str = 'cp "$last" "$out"', name: str = "gs") -> str:
        script = bin_dir / name
        script.write_text(_FAKE_GS % {"body": body})
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return factory


@pytest.fixture
def make_text_pdf() -> Callable[..., bytes]:
    return build_text_pdf


@pytest.fixture
def make_image_pdf() -> Callable[..., bytes]:
    return build_image_pdf
