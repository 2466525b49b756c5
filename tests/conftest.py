"""Shared fixtures: a throwaway data/uploads directory and a test client."""

from __future__ import annotations

import json
from pathlib import Path

import fitz  # PyMuPDF
import pytest
from fastapi.testclient import TestClient

from magshelf.config import Settings
from magshelf.main import create_app
from magshelf.storage import CatalogStore
from magshelf.uploads import AssetDirectory

ADMIN_PASSWORD = "test-secret"
AUTH = {"x-admin-password": ADMIN_PASSWORD}

# Not a decodable image; thumbnails are stored and served verbatim.
FAKE_JPEG = b"\xff\xd8\xff\xe0fake-jpeg-payload"


def make_pdf(num_pages: int = 1) -> bytes:
    """Build a small in-memory PDF with ``num_pages`` labelled pages."""
    doc = fitz.open()
    for n in range(1, num_pages + 1):
        page = doc.new_page(width=595, height=798)
        page.insert_text((72, 72), f"Page {n}")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        admin_password=ADMIN_PASSWORD,
        data_dir=tmp_path / "data",
        uploads_dir=tmp_path / "uploads",
        log_level="DEBUG",
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


@pytest.fixture
def store(settings: Settings) -> CatalogStore:
    return CatalogStore(settings.data_file, AssetDirectory(settings.uploads_dir))


@pytest.fixture(scope="session")
def pdf_bytes() -> bytes:
    return make_pdf(1)


@pytest.fixture
def create_item(client: TestClient, pdf_bytes: bytes):
    """POST a new item and return the response JSON."""

    def _create(
        collection: str = "magazines",
        title: str = "Issue 1",
        publish_date: str = "2024",
        authors=("A", "B"),
        pdf: bytes = None,
        thumbnail: bytes = None,
    ) -> dict:
        files = {"pdf": ("issue.pdf", pdf or pdf_bytes, "application/pdf")}
        if thumbnail is not None:
            files["thumbnail"] = ("thumbnail.jpg", thumbnail, "image/jpeg")
        data = {
            "title": title,
            "publishDate": publish_date,
            "authors": json.dumps(list(authors)),
        }
        response = client.post(f"/api/{collection}", data=data, files=files, headers=AUTH)
        assert response.status_code == 201, response.text
        return response.json()

    return _create