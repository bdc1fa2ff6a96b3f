import asyncio
from pathlib import PurePosixPath
from typing import Any, Optional
from urllib.parse import urlparse

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from pdfsqueeze.core.config import get_settings
from pdfsqueeze.core.errors import TranscodeError, ValidationError
from pdfsqueeze.core.logging import configure_logging
from pdfsqueeze.models import RemoteCompressionRequest
from pdfsqueeze.services.compression_service import CompressionService
from pdfsqueeze.services.fetcher import RemoteFetcher
from pdfsqueeze.services.result import CompressionResult, assemble_result
from pdfsqueeze.storage.local import LocalStorage
from pdfsqueeze.storage.remote import RemoteObjectStore
from pdfsqueeze.utils.file_utils import ensure_pdf, ensure_pdf_bytes, ensure_size

router = APIRouter(prefix="/pdf/compress", tags=["PDF Compression"])

logger = configure_logging()
settings = get_settings()
storage = LocalStorage(settings)
compression_service = CompressionService(settings, storage)
fetcher = RemoteFetcher(settings)
object_store = RemoteObjectStore(settings)


async def _compress(data: bytes, level: Any, filename: Optional[str]) -> CompressionResult:
  try:
    engine_result = await asyncio.wait_for(
      run_in_threadpool(compression_service.compress, data, level),
      timeout=settings.request_timeout,
    )
  except asyncio.TimeoutError as exc:
    raise TranscodeError(
      f"compression exceeded the {settings.request_timeout:g}s request budget",
      timed_out=True,
    ) from exc
  return assemble_result(engine_result, filename)


def _respond(result: CompressionResult) -> Response:
  return Response(content=result.data, media_type="application/pdf", headers=result.headers())


def _filename_from_url(url: str) -> Optional[str]:
  name = PurePosixPath(urlparse(url).path).name
  return name or None


@router.post("", summary="ضغط ملف PDF مرفوع مباشرة وإرجاعه")
async def compress_upload(
  file: Optional[UploadFile] = File(default=None),
  level: Optional[str] = Form(default="medium"),
) -> Response:
  if file is None:
    raise ValidationError("No file uploaded.")

  ensure_pdf(file.filename, file.content_type)
  data = await file.read()
  await file.close()
  ensure_size(len(data), settings.max_upload_bytes)
  ensure_pdf_bytes(data)

  logger.info("استلام ملف للضغط: %s (%s بايت، مستوى %s)", file.filename, len(data), level)
  result = await _compress(data, level, file.filename)
  return _respond(result)


@router.post("/remote", summary="ضغط ملف مرفوع مسبقًا إلى التخزين الوسيط")
async def compress_remote(payload: RemoteCompressionRequest) -> Response:
  if urlparse(payload.blob_url).scheme not in {"http", "https"}:
    raise ValidationError("A valid file URL is required.")

  try:
    if payload.filename:
      ensure_pdf(payload.filename)
    data = await run_in_threadpool(fetcher.fetch, payload.blob_url)
    ensure_pdf_bytes(data)
    logger.info("تم جلب ملف للضغط من التخزين: %s (%s بايت)", payload.blob_url, len(data))
    result = await _compress(data, payload.level, payload.filename or _filename_from_url(payload.blob_url))
  finally:
    # يُحذف الكائن المؤقت في كل الحالات لتفادي بقاء ملفات يتيمة
    await run_in_threadpool(object_store.delete, payload.blob_url)

  return _respond(result)
