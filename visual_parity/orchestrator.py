"""Pipeline orchestrator: coordinates resolve, compare, and report stages."""

from __future__ import annotations

import asyncio
import logging
import time

from visual_parity.executor.executor import Executor
from visual_parity.integrity.image_checker import ImageChecker
from visual_parity.models.comparison import ComparisonRun, PageTarget
from visual_parity.models.config import DeviceProfile, ParityConfig
from visual_parity.models.integrity import ImageCheckReport
from visual_parity.reporter.reporter import Reporter
from visual_parity.url_utils import check_page_parity, resolve_page_set

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REGRESSIONS = 1


class Orchestrator:
    """Coordinates the staging vs prod comparison pipeline."""

    def __init__(self, config: ParityConfig):
        self.config = config

    def resolve_pages(self) -> tuple[list[PageTarget], list[str]]:
        """Resolve the page set and collect parity warnings. Raises PageSetError."""
        targets = resolve_page_set(self.config)
        warnings = check_page_parity(self.config)
        return targets, warnings

    def run_full_pipeline(self, device_name: str | None = None) -> dict:
        """Execute resolve, compare and report for each device profile."""
        return asyncio.run(self._run_pipeline(device_name))

    async def _run_pipeline(self, device_name: str | None = None) -> dict:
        start = time.time()
        run_started = time.monotonic()
        devices = [self.config.get_device(device_name)] if device_name else list(self.config.devices)
        logger.info("=== Starting visual comparison: %s vs %s ===",
                    self.config.staging.base_url, self.config.prod.base_url)

        # Stage 1: Resolve
        logger.info("--- Stage 1: Resolve page set ---")
        targets, warnings = self.resolve_pages()
        logger.info("--- Stage 1 complete: %d pages, %d parity warnings ---",
                    len(targets), len(warnings))

        runs = []
        for device in devices:
            # Stage 2: Compare
            logger.info("--- Stage 2: Compare (%s) ---", device.name)
            stage_start = time.time()
            run = await self._compare(device, targets, run_started)
            logger.info("--- Stage 2 complete: %d passed, %d failed, %d errors in %.1fs ---",
                        run.passed, run.failed, run.errors, time.time() - stage_start)

            # Stage 3: Report
            logger.info("--- Stage 3: Report (%s) ---", device.name)
            reports = self._report(run)
            runs.append({
                "run_id": run.run_id,
                "device": run.device,
                "duration": run.duration_seconds,
                "results": {
                    "total": run.total,
                    "passed": run.passed,
                    "failed": run.failed,
                    "errors": run.errors,
                },
                "reports": reports,
            })

        duration = time.time() - start
        logger.info("=== Pipeline complete in %.1fs ===", duration)

        regressions = any(r["results"]["failed"] or r["results"]["errors"] for r in runs)
        return {
            "duration": round(duration, 2),
            "parity_warnings": warnings,
            "runs": runs,
            "exit_code": EXIT_REGRESSIONS if regressions else EXIT_OK,
        }

    async def _compare(self, device: DeviceProfile, targets: list[PageTarget],
                       run_started: float | None = None) -> ComparisonRun:
        executor = Executor(self.config, device, started=run_started)
        return await executor.execute(targets)

    def _report(self, run: ComparisonRun) -> dict[str, str]:
        reporter = Reporter(self.config)
        return reporter.generate_reports(run)

    def run_image_check(self) -> list[ImageCheckReport]:
        """Check every staging page for broken images."""
        targets = resolve_page_set(self.config)
        checker = ImageChecker(self.config)
        return asyncio.run(checker.check([t.staging_url for t in targets]))
