"""Shared pytest fixtures for Art Portfolio tests."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from artportfolio.api.artwork_store import JsonArtworkStore
from artportfolio.api.image_assets import ImageAssetManager
from artportfolio.api.main import create_app
from artportfolio.core.config import PortfolioConfig

# Smallest valid PNG: 1x1 transparent pixel.
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> PortfolioConfig:
    """Create a test configuration pointing at temporary paths.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PortfolioConfig instance for testing
    """
    return PortfolioConfig(
        _env_file=None,
        data_file=temp_dir / "data" / "data.json",
        uploads_dir=temp_dir / "uploads",
        max_upload_bytes=1024,
        allowed_origins="*",
    )


@pytest.fixture
def store(test_config: PortfolioConfig) -> JsonArtworkStore:
    """Record store on the test data file."""
    return JsonArtworkStore(test_config.data_file)


@pytest.fixture
def assets(test_config: PortfolioConfig) -> ImageAssetManager:
    """Image asset manager on the test uploads directory."""
    return ImageAssetManager(test_config.uploads_dir, max_bytes=test_config.max_upload_bytes)


@pytest.fixture
def test_client(
    test_config: PortfolioConfig,
    store: JsonArtworkStore,
    assets: ImageAssetManager,
) -> Generator[TestClient, None, None]:
    """TestClient over an app wired to the temporary store and uploads dir.

    Entering the client runs the lifespan, which creates the uploads
    directory.
    """
    app = create_app(test_config, store=store, assets=assets)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def png_bytes() -> bytes:
    """Bytes of a tiny valid PNG image."""
    return PNG_BYTES


@pytest.fixture
def artwork_form() -> dict:
    """Valid multipart text fields for creating an artwork."""
    return {
        "title": "Starry Night",
        "description": "Swirling night sky over a village.",
        "category": "Painting",
        "origin": "Saint-Rémy-de-Provence",
        "artist": "Vincent van Gogh",
        "createdDate": "1889-06-01",
        "status": "1",
    }


@pytest.fixture
def sample_artworks(test_config: PortfolioConfig, assets: ImageAssetManager) -> list[dict]:
    """Write twelve records with image files to the test store.

    Records alternate status 1, 0, 1, 0, ... and are titled ``Artwork 1`` to
    ``Artwork 12`` in insertion order.

    Returns:
        The list of record dictionaries as persisted.
    """
    assets.ensure_directory()
    records = []
    for i in range(1, 13):
        filename = f"artwork-sample-{i}.png"
        assets.path_for(filename).write_bytes(PNG_BYTES)
        records.append(
            {
                "id": f"sample-{i}",
                "title": f"Artwork {i}",
                "description": f"Description {i}",
                "category": "Painting",
                "origin": "Jakarta",
                "artist": "Test Artist",
                "createdDate": "2024-01-01",
                "status": 1 if i % 2 else 0,
                "image": f"http://testserver/uploads/{filename}",
                "createdAt": "2024-01-01T00:00:00.000Z",
                "updatedAt": "2024-01-01T00:00:00.000Z",
            }
        )

    test_config.data_file.parent.mkdir(parents=True, exist_ok=True)
    test_config.data_file.write_text(json.dumps(records, indent=2), encoding="utf-8")
    return records
