"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path

from visual_parity.models.comparison import ComparisonRun

from .ordering import order_for_review, summarize


def build_json_report(run: ComparisonRun) -> dict:
    """Machine-readable view of a run, rows in the same order as the HTML report."""
    summary = summarize(run.results)
    report = run.model_dump(exclude={"results"})
    report["summary"] = {
        "total": summary.total,
        "passed": summary.passed,
        "failed": summary.failed,
        "errors": summary.errors,
    }
    report["results"] = [
        {**r.model_dump(), "status": r.status}
        for r in order_for_review(run.results)
    ]
    return report


def generate_json_report(run: ComparisonRun, output_path: Path) -> None:
    """Write a machine-readable JSON report."""
    with open(output_path, "w") as f:
        json.dump(build_json_report(run), f, indent=2, default=str)
