"""Comparison executor: captures every page in both environments and scores it."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from pathlib import Path

from playwright.async_api import async_playwright

from visual_parity.imaging.codec import PillowCodec, RasterCodec
from visual_parity.imaging.differ import PixelmatchDiffer, RasterDiffer
from visual_parity.models.comparison import ComparisonResult, ComparisonRun, PageTarget
from visual_parity.models.config import DeviceProfile, ParityConfig
from visual_parity.utils.browser import create_capture_context, launch_browser

from .comparer import compare_captures
from .context import ArtifactPaths, RunContext
from .screenshot import CaptureOutcome, ScreenshotAcquirer

logger = logging.getLogger(__name__)


class Executor:
    """Runs the staging vs prod comparison for one device profile.

    Pages are partitioned across ``max_parallel_contexts`` workers. Each
    worker owns one browser context and processes its pages one at a time;
    results land in a slot indexed by page position, so the returned order
    always matches the page set regardless of completion order.
    """

    def __init__(
        self,
        config: ParityConfig,
        device: DeviceProfile,
        codec: RasterCodec | None = None,
        differ: RasterDiffer | None = None,
        started: float | None = None,
    ):
        self.config = config
        self.device = device
        # time.monotonic() at which the overall run began; the deadline counts from here.
        self.started = started
        self.codec = codec or PillowCodec()
        self.differ = differ or PixelmatchDiffer()
        self.run_id = f"run_{uuid.uuid4().hex[:8]}"

    async def execute(self, targets: list[PageTarget]) -> ComparisonRun:
        """Compare every target and return the finished, ordered run."""
        started_at = time.strftime("%Y-%m-%dT%H:%M:%SZ")
        start_time = time.time()
        ctx = RunContext.from_config(self.config, self.device, started=self.started)
        ctx.prepare_dirs()

        total = len(targets)
        worker_count = max(1, min(self.config.max_parallel_contexts, total))
        logger.info("Comparing %d pages on %s (%dx%d) with %d worker(s)",
                    total, self.device.name, self.device.width, self.device.height, worker_count)

        slots: list[ComparisonResult | None] = [None] * total
        queue: asyncio.Queue[int] = asyncio.Queue()
        for index in range(total):
            queue.put_nowait(index)

        async with async_playwright() as p:
            logger.debug("Launching Chromium for capture...")
            browser = await launch_browser(p)
            try:
                await asyncio.gather(*(
                    self._worker(worker_id, browser, targets, queue, slots, ctx)
                    for worker_id in range(worker_count)
                ))
            finally:
                await browser.close()

        results = [
            slot if slot is not None else ComparisonResult.acquisition_error(
                targets[i].page_path, "Page was never processed")
            for i, slot in enumerate(slots)
        ]

        duration = time.time() - start_time
        run = ComparisonRun(
            run_id=self.run_id,
            device=self.device.name,
            started_at=started_at,
            completed_at=time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            staging_base_url=self.config.staging.base_url,
            prod_base_url=self.config.prod.base_url,
            duration_seconds=round(duration, 2),
            results=results,
        )
        logger.info(
            "Comparison complete on %s: %d passed, %d failed, %d errors (%.1fs)",
            run.device, run.passed, run.failed, run.errors, duration,
        )
        return run

    async def _worker(
        self,
        worker_id: int,
        browser,
        targets: list[PageTarget],
        queue: asyncio.Queue[int],
        slots: list[ComparisonResult | None],
        ctx: RunContext,
    ) -> None:
        """Drain the page queue through one exclusive browser context."""
        context = None
        acquirer = None
        setup_error = ""
        try:
            context = await create_capture_context(browser, self.device, self.config.user_agent)
            page = await context.new_page()
            acquirer = ScreenshotAcquirer(
                page,
                wait_until=self.config.wait_until,
                navigation_timeout_ms=self.config.page_timeout_seconds * 1000,
                full_page=self.config.full_page,
            )
        except Exception as e:
            setup_error = f"Browser context could not be created: {e}"
            logger.error("Worker %d: %s", worker_id, setup_error)

        try:
            while True:
                try:
                    index = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                target = targets[index]
                logger.info("[%d/%d] %s", index + 1, len(targets), target.page_path)
                if acquirer is None:
                    slots[index] = ComparisonResult.acquisition_error(target.page_path, setup_error)
                    continue
                slots[index] = await self.compare_page(acquirer, target, ctx)
        finally:
            if context is not None:
                await context.close()

    async def compare_page(self, acquirer: ScreenshotAcquirer, target: PageTarget,
                           ctx: RunContext) -> ComparisonResult:
        """Capture and compare one page. Never raises; failures become error results."""
        page_start = time.time()
        paths = ctx.artifact_paths(target)
        try:
            result = await self._capture_and_compare(acquirer, target, paths, ctx)
        except Exception as e:
            logger.error("Comparison of %s crashed: %s", target.page_path, e)
            result = ComparisonResult.acquisition_error(
                target.page_path, f"Unexpected error: {e}",
                **self._existing_artifacts(paths.staging, paths.prod),
            )

        if result.outcome == "scored":
            logger.info("%s: %.2f%% similar", target.page_path, result.similarity)
        else:
            logger.warning("%s: %s (%s)", target.page_path, result.outcome, result.error_message)
        return result.model_copy(update={"duration_seconds": round(time.time() - page_start, 2)})

    async def _capture_and_compare(self, acquirer: ScreenshotAcquirer, target: PageTarget,
                                   paths: ArtifactPaths, ctx: RunContext) -> ComparisonResult:
        if ctx.remaining_seconds() <= 0:
            return ComparisonResult.acquisition_error(
                target.page_path, "Run deadline exceeded before capture started")

        # Drop artifacts left by an earlier run so they cannot pass for fresh captures.
        for path in paths.all():
            path.unlink(missing_ok=True)

        failures = []
        for label, url, path in (
            ("staging", target.staging_url, paths.staging),
            ("prod", target.prod_url, paths.prod),
        ):
            outcome = await self._acquire(acquirer, url, path, ctx)
            if not outcome.success or not path.exists():
                failures.append(outcome.reason or f"No {label} screenshot was written to {path}")

        if failures:
            return ComparisonResult.acquisition_error(
                target.page_path, "; ".join(failures),
                **self._existing_artifacts(paths.staging, paths.prod),
            )
        # CPU bound; off the event loop so other workers keep capturing.
        return await asyncio.to_thread(
            compare_captures, target.page_path, paths, ctx, self.codec, self.differ,
        )

    async def _acquire(self, acquirer: ScreenshotAcquirer, url: str, path: Path,
                       ctx: RunContext) -> CaptureOutcome:
        """Run one capture bounded by the page timeout and the run deadline."""
        budget = min(ctx.page_timeout_seconds, ctx.remaining_seconds())
        if budget <= 0:
            return CaptureOutcome(success=False, reason=f"Run deadline exceeded before capturing {url}")
        try:
            return await asyncio.wait_for(acquirer.capture(url, path), timeout=budget)
        except asyncio.TimeoutError:
            logger.error("Capture of %s timed out after %.0fs", url, budget)
            path.unlink(missing_ok=True)
            return CaptureOutcome(success=False, reason=f"Capture of {url} timed out after {budget:.0f}s")

    @staticmethod
    def _existing_artifacts(staging: Path, prod: Path) -> dict[str, str]:
        found = {}
        if staging.exists():
            found["staging_path"] = str(staging)
        if prod.exists():
            found["prod_path"] = str(prod)
        return found
