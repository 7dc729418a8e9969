"""Image integrity checker: finds broken <img> references on staging pages."""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from playwright.async_api import APIRequestContext, Page, async_playwright

from visual_parity.models.config import DeviceProfile, ParityConfig
from visual_parity.models.integrity import BrokenImage, ImageCheckReport
from visual_parity.utils.browser import create_capture_context, launch_browser

logger = logging.getLogger(__name__)

_COLLECT_SRCS = "els => els.map(e => e.getAttribute('src'))"


def resolve_image_url(src: str, page_url: str) -> str:
    """Resolve relative and protocol-relative image sources against the page URL."""
    src = src.strip()
    if src.startswith("//"):
        return f"https:{src}"
    if src.startswith(("http://", "https://", "data:")):
        return src
    return urljoin(page_url, src)


def is_excluded(url: str, patterns: list[str]) -> bool:
    return any(p in url for p in patterns)


class ImageChecker:
    """Loads pages and requests every image they reference."""

    def __init__(self, config: ParityConfig):
        self.config = config
        self.exclude_patterns = config.image_check_exclude_patterns
        self.timeout_ms = config.page_timeout_seconds * 1000

    async def check(self, page_urls: list[str]) -> list[ImageCheckReport]:
        reports = []
        async with async_playwright() as p:
            browser = await launch_browser(p)
            try:
                context = await create_capture_context(
                    browser, self.config.devices[0] if self.config.devices else DeviceProfile(),
                    self.config.user_agent,
                )
                page = await context.new_page()
                for i, url in enumerate(page_urls):
                    logger.info("[%d/%d] Checking images on %s", i + 1, len(page_urls), url)
                    report = await self.check_page(page, context.request, url)
                    if report.passed:
                        logger.info("No broken images on %s (%d checked)", url, report.images_checked)
                    else:
                        logger.warning("%s: %d broken image(s)%s", url, len(report.broken),
                                       f", page error: {report.error}" if report.error else "")
                    reports.append(report)
                await context.close()
            finally:
                await browser.close()
        return reports

    async def check_page(self, page: Page, request: APIRequestContext, url: str) -> ImageCheckReport:
        """Check one page. Never raises; a page that cannot load is reported as such."""
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
            srcs = await page.eval_on_selector_all("img", _COLLECT_SRCS)
        except Exception as e:
            logger.error("Could not load %s: %s", url, e)
            return ImageCheckReport(page_url=url, error=str(e))

        report = ImageCheckReport(page_url=url, images_found=len(srcs))
        for index, src in enumerate(srcs, 1):
            if not src or not src.strip():
                logger.debug("Image %d on %s has no src attribute", index, url)
                report.broken.append(BrokenImage(index=index, reason="Missing src attribute"))
                continue

            image_url = resolve_image_url(src, url)
            if image_url.startswith("data:"):
                report.images_skipped += 1
                continue
            if is_excluded(image_url, self.exclude_patterns):
                logger.debug("Image %d is a tracking pixel or excluded URL: %s", index, image_url)
                report.images_skipped += 1
                continue

            report.images_checked += 1
            try:
                response = await request.get(image_url, timeout=self.timeout_ms)
                status = response.status
                await response.dispose()
            except Exception as e:
                report.broken.append(BrokenImage(index=index, src=image_url, reason=f"Request failed: {e}"))
                continue
            if status != 200:
                report.broken.append(BrokenImage(index=index, src=image_url, reason=f"HTTP {status}"))
        return report
