"""Comparison data structures produced by the executor."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Outcome = Literal["scored", "size_mismatch", "acquisition_error"]
Status = Literal["pass", "fail", "error"]

# Similarity percentage at or above which a page passes.
PASS_THRESHOLD = 95.0


class PageTarget(BaseModel):
    """A page path paired with its absolute URL in each environment."""

    model_config = ConfigDict(frozen=True)

    page_path: str
    sanitized_path: str
    staging_url: str
    prod_url: str


class ComparisonResult(BaseModel):
    """Terminal record of one page's staging vs production comparison."""

    model_config = ConfigDict(frozen=True)

    page_path: str
    outcome: Outcome
    similarity: Optional[float] = None
    error_message: Optional[str] = None
    staging_path: Optional[str] = None
    prod_path: Optional[str] = None
    diff_path: Optional[str] = None
    mismatched_pixels: Optional[int] = None
    total_pixels: Optional[int] = None
    duration_seconds: float = 0.0

    @model_validator(mode="after")
    def check_outcome_fields(self) -> "ComparisonResult":
        if self.outcome == "scored":
            if self.similarity is None:
                raise ValueError("scored result requires a similarity")
            if not 0.0 <= self.similarity <= 100.0:
                raise ValueError(f"similarity out of range: {self.similarity}")
            if self.error_message is not None:
                raise ValueError("scored result cannot carry an error message")
        else:
            if self.similarity is not None:
                raise ValueError(f"{self.outcome} result cannot carry a similarity")
            if self.diff_path is not None:
                raise ValueError(f"{self.outcome} result cannot carry a diff artifact")
        return self

    @classmethod
    def scored(cls, page_path: str, similarity: float, diff_path: str, **kwargs) -> "ComparisonResult":
        return cls(page_path=page_path, outcome="scored", similarity=similarity,
                   diff_path=diff_path, **kwargs)

    @classmethod
    def size_mismatch(cls, page_path: str, message: str, **kwargs) -> "ComparisonResult":
        return cls(page_path=page_path, outcome="size_mismatch", error_message=message, **kwargs)

    @classmethod
    def acquisition_error(cls, page_path: str, message: str, **kwargs) -> "ComparisonResult":
        return cls(page_path=page_path, outcome="acquisition_error", error_message=message, **kwargs)

    @property
    def status(self) -> Status:
        return classify(self)


def classify(result: ComparisonResult) -> Status:
    """Pass at or above the threshold, fail below it, error for anything unscored."""
    if result.outcome != "scored" or result.similarity is None:
        return "error"
    return "pass" if result.similarity >= PASS_THRESHOLD else "fail"


class ComparisonRun(BaseModel):
    run_id: str
    device: str
    started_at: str
    completed_at: str
    staging_base_url: str
    prod_base_url: str
    duration_seconds: float = 0.0
    results: list[ComparisonResult] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.status == "pass")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == "fail")

    @property
    def errors(self) -> int:
        return sum(1 for r in self.results if r.status == "error")

    @property
    def all_passed(self) -> bool:
        return self.passed == self.total
