"""Image integrity check results."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class BrokenImage(BaseModel):
    index: int  # 1-based position among the page's <img> elements
    src: str = ""
    reason: str = ""


class ImageCheckReport(BaseModel):
    page_url: str
    images_found: int = 0
    images_checked: int = 0
    images_skipped: int = 0
    broken: list[BrokenImage] = Field(default_factory=list)
    error: Optional[str] = None  # page could not be loaded at all

    @property
    def passed(self) -> bool:
        return self.error is None and not self.broken
