"""Page set resolution: pair page paths with staging and production URLs."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from visual_parity.models.comparison import PageTarget
from visual_parity.models.config import ParityConfig

logger = logging.getLogger(__name__)


class PageSetError(Exception):
    """The page set cannot be resolved into a usable list of targets."""


def sanitize_page_path(page_path: str) -> str:
    """Flatten a page path into a file name by replacing path separators."""
    return page_path.replace("/", "_").replace("\\", "_")


def resolve_url(base_url: str, page_path: str) -> str:
    """Join a base URL and a page path without doubling the slash."""
    base = base_url.rstrip("/")
    if not page_path:
        return base + "/"
    if page_path.startswith(("/", "?")):
        return base + page_path
    return f"{base}/{page_path}"


def to_page_path(url: str, base_url: str) -> str:
    """Reduce an absolute URL (or a bare path) to a page path relative to base_url."""
    base = base_url.rstrip("/")
    if url.startswith(base):
        rest = url[len(base):]
        return rest or "/"
    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        path = parsed.path or "/"
        return f"{path}?{parsed.query}" if parsed.query else path
    return url


def check_page_parity(config: ParityConfig) -> list[str]:
    """Compare the production URL list with the staging one.

    The staging list is authoritative, so differences only produce warnings.
    """
    if not config.prod.urls:
        return []

    staging_paths = list(config.staging.urls)
    prod_paths = [to_page_path(u, config.prod.base_url) for u in config.prod.urls]

    warnings = []
    missing = [p for p in staging_paths if p not in prod_paths]
    extra = [p for p in prod_paths if p not in staging_paths]
    for p in missing:
        warnings.append(f"Page '{p}' is listed for staging but not for prod")
    for p in extra:
        warnings.append(f"Page '{p}' is listed for prod but not for staging")
    if not missing and not extra and staging_paths != prod_paths:
        warnings.append("Staging and prod page lists are in a different order")

    for w in warnings:
        logger.warning(w)
    return warnings


def resolve_page_set(config: ParityConfig) -> list[PageTarget]:
    """Build the ordered list of page targets from the staging page list."""
    if not config.staging.urls:
        raise PageSetError("No page paths configured for staging")

    targets: list[PageTarget] = []
    seen: dict[str, str] = {}
    for page_path in config.staging.urls:
        sanitized = sanitize_page_path(page_path)
        if sanitized in seen:
            raise PageSetError(
                f"Page paths '{seen[sanitized]}' and '{page_path}' both map to artifact name '{sanitized}'"
            )
        seen[sanitized] = page_path
        targets.append(PageTarget(
            page_path=page_path,
            sanitized_path=sanitized,
            staging_url=resolve_url(config.staging.base_url, page_path),
            prod_url=resolve_url(config.prod.base_url, page_path),
        ))

    logger.debug("Resolved %d page targets", len(targets))
    return targets
