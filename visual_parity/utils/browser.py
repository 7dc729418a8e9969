"""Browser setup: launches Chromium and builds per-worker capture contexts."""

from __future__ import annotations

from typing import Optional

from playwright.async_api import Browser, BrowserContext, Playwright

from visual_parity.models.config import DeviceProfile

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# Freeze CSS animations and transitions so both environments rasterize the same frame.
_SETTLE_INIT_SCRIPT = """
window.addEventListener('DOMContentLoaded', () => {
    const style = document.createElement('style');
    style.textContent = `*, *::before, *::after {
        animation-duration: 0s !important;
        animation-delay: 0s !important;
        transition-duration: 0s !important;
        transition-delay: 0s !important;
        caret-color: transparent !important;
    }`;
    document.head.appendChild(style);
});
"""


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch Chromium for capture."""
    return await playwright.chromium.launch(headless=headless)


async def create_capture_context(
    browser: Browser,
    device: DeviceProfile,
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create an isolated context sized to the device profile.

    Each capture worker owns exactly one of these; contexts are never shared
    across concurrent page loads.
    """
    context = await browser.new_context(
        viewport={"width": device.width, "height": device.height},
        user_agent=user_agent or DEFAULT_USER_AGENT,
        locale="en-US",
        timezone_id="America/New_York",
        extra_http_headers={
            "Accept-Language": "en-US,en;q=0.9",
        },
    )
    await context.add_init_script(_SETTLE_INIT_SCRIPT)
    return context
