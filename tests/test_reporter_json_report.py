"""Tests for the JSON report output."""

import json

from visual_parity.models.comparison import ComparisonResult
from visual_parity.reporter.json_report import build_json_report, generate_json_report


class TestBuildJsonReport:

    def test_structure(self, run_factory):
        run = run_factory([
            ComparisonResult.scored("/", similarity=99.0, diff_path="d.png"),
            ComparisonResult.acquisition_error("/about/", "timed out"),
        ])
        report = build_json_report(run)

        assert report["run_id"] == "run_0001"
        assert report["device"] == "Desktop"
        assert report["summary"] == {"total": 2, "passed": 1, "failed": 0, "errors": 1}
        assert [r["page_path"] for r in report["results"]] == ["/about/", "/"]
        assert report["results"][0]["status"] == "error"
        assert report["results"][0]["similarity"] is None
        assert report["results"][1]["status"] == "pass"


class TestGenerateJsonReport:

    def test_writes_valid_json(self, run_factory, tmp_path):
        run = run_factory([ComparisonResult.scored("/", similarity=42.5, diff_path="d.png")])
        out = tmp_path / "report.json"
        generate_json_report(run, out)

        data = json.loads(out.read_text())
        assert data["results"][0]["similarity"] == 42.5
        assert data["results"][0]["status"] == "fail"
        assert data["staging_base_url"] == "https://staging.example.com"
