"""Tests for comparison result models and classification."""

import pytest
from pydantic import ValidationError

from visual_parity.models.comparison import PASS_THRESHOLD, ComparisonResult, classify


class TestComparisonResultInvariants:

    def test_scored_requires_similarity(self):
        with pytest.raises(ValidationError):
            ComparisonResult(page_path="/", outcome="scored")

    def test_scored_rejects_error_message(self):
        with pytest.raises(ValidationError):
            ComparisonResult(page_path="/", outcome="scored", similarity=99.0, error_message="boom")

    def test_error_rejects_similarity(self):
        with pytest.raises(ValidationError):
            ComparisonResult(page_path="/", outcome="acquisition_error", similarity=50.0)

    def test_error_rejects_diff_artifact(self):
        with pytest.raises(ValidationError):
            ComparisonResult(page_path="/", outcome="size_mismatch", diff_path="diff/_.png")

    @pytest.mark.parametrize("value", [-0.1, 100.01])
    def test_similarity_bounds(self, value):
        with pytest.raises(ValidationError):
            ComparisonResult.scored("/", similarity=value, diff_path="d.png")

    def test_results_are_frozen(self):
        r = ComparisonResult.scored("/", similarity=99.0, diff_path="d.png")
        with pytest.raises(ValidationError):
            r.similarity = 10.0

    def test_factories(self):
        scored = ComparisonResult.scored("/a/", similarity=97.5, diff_path="d.png")
        assert scored.outcome == "scored" and scored.diff_path == "d.png"
        err = ComparisonResult.acquisition_error("/b/", "timed out")
        assert err.outcome == "acquisition_error" and err.error_message == "timed out"
        mismatch = ComparisonResult.size_mismatch("/c/", "64x40 vs 64x41")
        assert mismatch.outcome == "size_mismatch" and mismatch.similarity is None


class TestClassify:

    def test_threshold_is_inclusive(self):
        assert PASS_THRESHOLD == 95.0
        assert classify(ComparisonResult.scored("/", similarity=95.0, diff_path="d.png")) == "pass"

    def test_just_below_threshold_fails(self):
        assert classify(ComparisonResult.scored("/", similarity=94.999999, diff_path="d.png")) == "fail"

    def test_errors_classify_as_error(self):
        assert classify(ComparisonResult.acquisition_error("/", "nope")) == "error"
        assert classify(ComparisonResult.size_mismatch("/", "nope")) == "error"

    def test_status_property(self):
        assert ComparisonResult.scored("/", similarity=12.0, diff_path="d.png").status == "fail"


class TestComparisonRunCounts:

    def test_counts(self, run_factory):
        run = run_factory([
            ComparisonResult.scored("/a", similarity=99.0, diff_path="d.png"),
            ComparisonResult.scored("/b", similarity=40.0, diff_path="d.png"),
            ComparisonResult.acquisition_error("/c", "x"),
        ])
        assert (run.total, run.passed, run.failed, run.errors) == (3, 1, 1, 1)
        assert not run.all_passed
