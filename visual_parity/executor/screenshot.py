"""Screenshot acquirer: loads a page and rasterizes it to a PNG file."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from playwright.async_api import Page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureOutcome:
    success: bool
    reason: str = ""


class ScreenshotAcquirer:
    """Captures full-page screenshots through a single Playwright page.

    One acquirer belongs to one worker; its page is reused for every capture
    that worker makes.
    """

    def __init__(self, page: Page, wait_until: str = "networkidle",
                 navigation_timeout_ms: int = 60000, full_page: bool = True):
        self.page = page
        self.wait_until = wait_until
        self.navigation_timeout_ms = navigation_timeout_ms
        self.full_page = full_page

    async def capture(self, url: str, output_path: Path) -> CaptureOutcome:
        """Navigate to url and write a screenshot to output_path.

        The file is written under a temporary name and renamed into place, so
        a failed capture never leaves a partial artifact behind.
        """
        tmp_path = output_path.with_name(output_path.name + ".part")
        try:
            logger.info("Navigating to: %s", url)
            response = await self.page.goto(
                url, wait_until=self.wait_until, timeout=self.navigation_timeout_ms,
            )
            if response is not None and response.status >= 400:
                logger.warning("%s answered with HTTP %d", url, response.status)

            data = await self.page.screenshot(full_page=self.full_page, animations="disabled")
            output_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            os.replace(tmp_path, output_path)
            logger.debug("Screenshot captured: %s", output_path)
            return CaptureOutcome(success=True)
        except asyncio.CancelledError:
            tmp_path.unlink(missing_ok=True)
            raise
        except Exception as e:
            logger.error("Failed to capture screenshot for %s: %s", url, e)
            tmp_path.unlink(missing_ok=True)
            return CaptureOutcome(success=False, reason=f"Capture failed for {url}: {e}")
