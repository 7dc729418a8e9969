"""Row ordering and summary counts for comparison reports."""

from __future__ import annotations

from dataclasses import dataclass

from visual_parity.models.comparison import ComparisonResult, classify


def _sort_key(result: ComparisonResult) -> tuple[int, float]:
    if classify(result) == "error":
        return (0, 0.0)
    return (1, result.similarity)


def order_for_review(results: list[ComparisonResult]) -> list[ComparisonResult]:
    """Errors first, then ascending similarity, so passing pages trail.

    sorted() is stable: rows with equal keys keep their input order.
    """
    return sorted(results, key=_sort_key)


@dataclass(frozen=True)
class Summary:
    total: int
    passed: int
    failed: int
    errors: int


def summarize(results: list[ComparisonResult]) -> Summary:
    statuses = [classify(r) for r in results]
    return Summary(
        total=len(results),
        passed=statuses.count("pass"),
        failed=statuses.count("fail"),
        errors=statuses.count("error"),
    )
