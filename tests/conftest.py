"""Pytest configuration and shared fixtures."""

import io
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image, ImageDraw
from playwright.async_api import Page

from visual_parity.models.comparison import ComparisonResult, ComparisonRun, PageTarget
from visual_parity.models.config import DeviceProfile, EnvironmentConfig, ParityConfig
from visual_parity.url_utils import resolve_page_set


# ============================================================================
# Image Helpers
# ============================================================================


def make_image(width: int, height: int, color=(255, 255, 255, 255), box=None, box_color=(0, 0, 0, 255)) -> Image.Image:
    """Create an RGBA image, optionally with a filled rectangle."""
    img = Image.new("RGBA", (width, height), color)
    if box:
        ImageDraw.Draw(img).rectangle(box, fill=box_color)
    return img


def make_png(width: int, height: int, **kwargs) -> bytes:
    """Create PNG bytes for an RGBA image."""
    buf = io.BytesIO()
    make_image(width, height, **kwargs).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_factory():
    """Fixture that provides the make_png function."""
    return make_png


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def device() -> DeviceProfile:
    return DeviceProfile(name="Desktop", width=1280, height=800)


@pytest.fixture
def parity_config(tmp_path: Path, device: DeviceProfile) -> ParityConfig:
    """A config with a small canvas so pixel diffs stay fast in tests."""
    return ParityConfig(
        staging=EnvironmentConfig(
            base_url="https://staging.example.com",
            urls=["/", "/about/", "/apply/?d=PROGRAM-1"],
        ),
        prod=EnvironmentConfig(
            base_url="https://www.example.com",
            urls=[
                "https://www.example.com/",
                "https://www.example.com/about/",
                "https://www.example.com/apply/?d=PROGRAM-1",
            ],
        ),
        devices=[device],
        canvas_width=64,
        canvas_height=40,
        screenshots_dir=str(tmp_path / "screenshots"),
        report_output_dir=str(tmp_path / "reports"),
        page_timeout_seconds=5,
    )


@pytest.fixture
def temp_config_file(parity_config: ParityConfig, tmp_path: Path) -> Path:
    """Create a temporary config file."""
    config_file = tmp_path / "parity-config.json"
    parity_config.save(config_file)
    return config_file


@pytest.fixture
def page_targets(parity_config: ParityConfig) -> list[PageTarget]:
    return resolve_page_set(parity_config)


# ============================================================================
# Result Fixtures
# ============================================================================


def make_run(results: list[ComparisonResult], **kwargs) -> ComparisonRun:
    """Create a ComparisonRun with sensible defaults for report testing."""
    defaults = {
        "run_id": "run_0001",
        "device": "Desktop",
        "started_at": "2025-01-01T00:00:00Z",
        "completed_at": "2025-01-01T00:05:00Z",
        "staging_base_url": "https://staging.example.com",
        "prod_base_url": "https://www.example.com",
        "duration_seconds": 300.0,
        "results": results,
    }
    defaults.update(kwargs)
    return ComparisonRun(**defaults)


@pytest.fixture
def run_factory():
    """Fixture that provides the make_run function."""
    return make_run


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright page."""
    page = AsyncMock(spec=Page)
    page.url = "https://staging.example.com/"
    page.goto = AsyncMock(return_value=Mock(status=200))
    page.screenshot = AsyncMock(return_value=make_png(80, 120))
    page.eval_on_selector_all = AsyncMock(return_value=[])
    return page
