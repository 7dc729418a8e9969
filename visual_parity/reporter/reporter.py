"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from visual_parity.models.comparison import ComparisonRun
from visual_parity.models.config import ParityConfig

from .html_report import generate_html_report
from .json_report import generate_json_report

logger = logging.getLogger(__name__)


class ReportWriteError(Exception):
    """The report could not be written; this aborts the run."""


class Reporter:
    """Generates reports from a finished comparison run."""

    def __init__(self, config: ParityConfig):
        self.config = config

    def report_path(self, device: str, fmt: str, output_dir: Path | None = None) -> Path:
        out_dir = output_dir or Path(self.config.report_output_dir)
        return out_dir / f"visual_comparison_report_{device}.{fmt}"

    def generate_reports(self, run: ComparisonRun, output_dir: Path | None = None) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.report_output_dir)
        generated = {}
        logger.debug("Report output directory: %s", out_dir)

        try:
            out_dir.mkdir(parents=True, exist_ok=True)

            if "html" in self.config.report_formats:
                path = self.report_path(run.device, "html", out_dir)
                logger.debug("Generating HTML report...")
                generate_html_report(run, path)
                generated["html"] = str(path)
                logger.info("HTML report: %s", path)

            if "json" in self.config.report_formats:
                path = self.report_path(run.device, "json", out_dir)
                logger.debug("Generating JSON report...")
                generate_json_report(run, path)
                generated["json"] = str(path)
                logger.info("JSON report: %s", path)
        except OSError as e:
            raise ReportWriteError(f"Could not write report to {out_dir}: {e}") from e

        return generated
