"""Configuration models for the visual parity runner."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class DeviceProfile(BaseModel):
    name: str = "Desktop"
    width: int = 1280
    height: int = 800


class EnvironmentConfig(BaseModel):
    """One deployment under test: its base URL and the page paths to visit."""

    base_url: str = Field(validation_alias=AliasChoices("base_url", "baseUrl"))
    urls: list[str] = Field(default_factory=list)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("base_url must not be empty")
        return v.rstrip("/")


class ParityConfig(BaseModel):
    # Environments
    staging: EnvironmentConfig
    prod: EnvironmentConfig

    # Devices and canvas
    devices: list[DeviceProfile] = Field(default_factory=lambda: [DeviceProfile()])
    canvas_width: int = 1280
    canvas_height: int = 800

    # Capture settings
    wait_until: str = "networkidle"
    full_page: bool = True
    user_agent: Optional[str] = None

    # Execution limits
    max_parallel_contexts: int = 1
    max_execution_time_seconds: int = 7200
    page_timeout_seconds: int = 60

    # Output
    screenshots_dir: str = "screenshots"
    report_output_dir: str = "."
    report_formats: list[str] = Field(default_factory=lambda: ["html", "json"])

    # Image integrity check
    image_check_exclude_patterns: list[str] = Field(
        default_factory=lambda: ["bat.bing.com", "tracking"]
    )

    @field_validator("max_parallel_contexts", "canvas_width", "canvas_height", "page_timeout_seconds")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("wait_until")
    @classmethod
    def known_load_state(cls, v: str) -> str:
        allowed = ("load", "domcontentloaded", "networkidle", "commit")
        if v not in allowed:
            raise ValueError(f"wait_until must be one of {', '.join(allowed)}")
        return v

    def get_device(self, name: str) -> DeviceProfile:
        """Look up a device profile by name (case-insensitive)."""
        for device in self.devices:
            if device.name.lower() == name.lower():
                return device
        known = ", ".join(d.name for d in self.devices)
        raise KeyError(f"Unknown device '{name}' (configured: {known})")

    @classmethod
    def load(cls, path: str | Path) -> "ParityConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
