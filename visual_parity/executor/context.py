"""Run context: the per-run settings passed down the comparison call chain."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path

from visual_parity.models.comparison import PageTarget
from visual_parity.models.config import DeviceProfile, ParityConfig

STAGING_DIR = "staging"
PROD_DIR = "prod"
DIFF_DIR = "diff"


@dataclass(frozen=True)
class ArtifactPaths:
    staging: Path
    prod: Path
    diff: Path

    def all(self) -> tuple[Path, Path, Path]:
        return self.staging, self.prod, self.diff


@dataclass(frozen=True)
class RunContext:
    device: DeviceProfile
    base_dir: Path  # screenshots/<device>
    canvas_width: int = 1280
    canvas_height: int = 800
    page_timeout_seconds: float = 60.0
    deadline: float = float("inf")  # time.monotonic() value

    @classmethod
    def from_config(cls, config: ParityConfig, device: DeviceProfile,
                    started: float | None = None) -> "RunContext":
        started = time.monotonic() if started is None else started
        return cls(
            device=device,
            base_dir=Path(config.screenshots_dir) / device.name,
            canvas_width=config.canvas_width,
            canvas_height=config.canvas_height,
            page_timeout_seconds=float(config.page_timeout_seconds),
            deadline=started + config.max_execution_time_seconds,
        )

    def artifact_paths(self, target: PageTarget) -> ArtifactPaths:
        name = f"{target.sanitized_path}.png"
        return ArtifactPaths(
            staging=self.base_dir / STAGING_DIR / name,
            prod=self.base_dir / PROD_DIR / name,
            diff=self.base_dir / DIFF_DIR / name,
        )

    def prepare_dirs(self) -> None:
        for sub in (STAGING_DIR, PROD_DIR, DIFF_DIR):
            (self.base_dir / sub).mkdir(parents=True, exist_ok=True)

    def remaining_seconds(self) -> float:
        return self.deadline - time.monotonic()
