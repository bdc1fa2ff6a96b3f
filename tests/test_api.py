from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient

from pdfsqueeze.api import compress as compress_api
from pdfsqueeze.core.errors import RetrievalError
from pdfsqueeze.main import app
from pdfsqueeze.services.compression_service import CompressionService

BLOB_URL = "https://store.example.com/uploads/scan-Xy12.pdf"


class FakeFetcher:
    def __init__(self, payload: bytes | None = None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.urls: List[str] = []

    def fetch(self, url: str) -> bytes:
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.payload


class FakeObjectStore:
    def __init__(self) -> None:
        self.deleted: List[str] = []

    def delete(self, url: str) -> bool:
        self.deleted.append(url)
        return True


@pytest.fixture
def client(settings, monkeypatch) -> TestClient:
    monkeypatch.setattr(compress_api, "settings", settings)
    monkeypatch.setattr(compress_api, "compression_service", CompressionService(settings, probe=lambda _: None))
    return TestClient(app)


@pytest.fixture
def object_store(monkeypatch) -> FakeObjectStore:
    store = FakeObjectStore()
    monkeypatch.setattr(compress_api, "object_store", store)
    return store


def _upload(client: TestClient, data: bytes, filename: str = "scan.pdf", level: str = "high", content_type: str = "application/pdf"):
    return client.post(
        "/pdf/compress",
        files={"file": (filename, data, content_type)},
        data={"level": level},
    )


def test_upload_returns_compressed_pdf_with_metadata(client: TestClient, image_pdf: bytes) -> None:
    response = _upload(client, image_pdf, filename="Scan.PDF")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["x-engine"] == "mupdf"
    assert int(response.headers["x-original-size"]) == len(image_pdf)
    assert int(response.headers["x-compressed-size"]) == len(response.content) < len(image_pdf)
    assert response.headers["content-disposition"] == 'attachment; filename="Scan_compressed.pdf"'
    assert response.headers["cache-control"] == "no-store"
    assert response.content.startswith(b"%PDF-")


def test_text_only_upload_returns_original_bytes(client: TestClient, text_pdf: bytes) -> None:
    response = _upload(client, text_pdf, level="medium")

    assert response.status_code == 200
    assert response.content == text_pdf
    assert response.headers["x-engine"] == "mupdf"


def test_missing_file_is_rejected(client: TestClient) -> None:
    response = client.post("/pdf/compress", data={"level": "high"})

    assert response.status_code == 400
    assert response.json() == {"detail": "No file uploaded."}


def test_non_pdf_upload_is_rejected(client: TestClient) -> None:
    response = _upload(client, b"hello", filename="notes.txt", content_type="text/plain")

    assert response.status_code == 400
    assert response.json()["detail"] == "Only PDF files are accepted."


def test_pdf_name_without_pdf_content_is_rejected(client: TestClient) -> None:
    response = _upload(client, b"GIF89a....", filename="fake.pdf")

    assert response.status_code == 400


def test_oversized_upload_is_rejected(client: TestClient, settings, image_pdf: bytes) -> None:
    settings.max_upload_bytes = 1024 * 1024

    response = _upload(client, image_pdf)

    assert response.status_code == 413
    assert "limit" in response.json()["detail"]


def test_encrypted_upload(client: TestClient, encrypted_pdf: bytes) -> None:
    response = _upload(client, encrypted_pdf)

    assert response.status_code == 422
    assert "password" in response.json()["detail"]


def test_corrupted_upload_gets_generic_message(client: TestClient) -> None:
    response = _upload(client, b"%PDF-1.4\n garbage without objects")

    assert response.status_code == 422
    assert "corrupted" in response.json()["detail"]


def test_remote_compression_deletes_blob(client: TestClient, object_store, monkeypatch, image_pdf: bytes) -> None:
    fetcher = FakeFetcher(image_pdf)
    monkeypatch.setattr(compress_api, "fetcher", fetcher)

    response = client.post("/pdf/compress/remote", json={"blobUrl": BLOB_URL, "level": "high", "filename": "scan.pdf"})

    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="scan_compressed.pdf"'
    assert fetcher.urls == [BLOB_URL]
    assert object_store.deleted == [BLOB_URL]


def test_remote_filename_defaults_to_url_name(client: TestClient, object_store, monkeypatch, image_pdf: bytes) -> None:
    monkeypatch.setattr(compress_api, "fetcher", FakeFetcher(image_pdf))

    response = client.post("/pdf/compress/remote", json={"blob_url": BLOB_URL})

    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="scan-Xy12_compressed.pdf"'


def test_remote_retrieval_failure(client: TestClient, object_store, monkeypatch) -> None:
    error = RetrievalError("Failed to retrieve document after 4 attempts: HTTP 404", attempts=4, cause="HTTP 404")
    monkeypatch.setattr(compress_api, "fetcher", FakeFetcher(error=error))

    response = client.post("/pdf/compress/remote", json={"blobUrl": BLOB_URL})

    assert response.status_code == 502
    assert response.json()["detail"] == "Could not retrieve the uploaded file. Please try again."
    assert object_store.deleted == [BLOB_URL]


def test_remote_compression_failure_still_deletes_blob(client: TestClient, object_store, monkeypatch, encrypted_pdf: bytes) -> None:
    monkeypatch.setattr(compress_api, "fetcher", FakeFetcher(encrypted_pdf))

    response = client.post("/pdf/compress/remote", json={"blobUrl": BLOB_URL})

    assert response.status_code == 422
    assert object_store.deleted == [BLOB_URL]


def test_remote_rejects_non_http_url(client: TestClient, object_store) -> None:
    response = client.post("/pdf/compress/remote", json={"blobUrl": "file:///etc/passwd"})

    assert response.status_code == 400
    assert object_store.deleted == []


def test_health_reports_engine(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr("pdfsqueeze.main.find_native_transcoder", lambda settings: None)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["engine"] == "mupdf"


def test_remote_bad_filename_still_deletes_blob(client: TestClient, object_store, monkeypatch, image_pdf: bytes) -> None:
    fetcher = FakeFetcher(image_pdf)
    monkeypatch.setattr(compress_api, "fetcher", fetcher)

    response = client.post("/pdf/compress/remote", json={"blobUrl": BLOB_URL, "filename": "report"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Only PDF files are accepted."}
    assert fetcher.urls == []
    assert object_store.deleted == [BLOB_URL]


def test_remote_non_string_level_falls_back_to_medium(client: TestClient, object_store, monkeypatch, image_pdf: bytes) -> None:
    monkeypatch.setattr(compress_api, "fetcher", FakeFetcher(image_pdf))

    response = client.post("/pdf/compress/remote", json={"blobUrl": BLOB_URL, "level": 3})

    assert response.status_code == 200
    assert response.headers["x-engine"] == "mupdf"
    assert int(response.headers["x-compressed-size"]) < len(image_pdf)
    assert object_store.deleted == [BLOB_URL]


def test_remote_missing_blob_url_is_a_validation_error(client: TestClient, object_store) -> None:
    response = client.post("/pdf/compress/remote", json={"level": "high"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Missing required field: blobUrl."}
    assert object_store.deleted == []


def test_remote_malformed_body_is_a_validation_error(client: TestClient, object_store) -> None:
    response = client.post(
        "/pdf/compress/remote",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert isinstance(response.json()["detail"], str)
