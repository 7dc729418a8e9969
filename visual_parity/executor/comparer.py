"""Capture comparison: normalize both captures, diff them, persist the mask."""

from __future__ import annotations

import logging

from visual_parity.imaging.codec import DecodeError, RasterCodec
from visual_parity.imaging.differ import RasterDiffer
from visual_parity.models.comparison import ComparisonResult

from .context import ArtifactPaths, RunContext

logger = logging.getLogger(__name__)


def compare_captures(
    page_path: str,
    paths: ArtifactPaths,
    ctx: RunContext,
    codec: RasterCodec,
    differ: RasterDiffer,
) -> ComparisonResult:
    """Compare the staging and prod captures already on disk for one page.

    Both captures are rewritten in place with their normalized versions so the
    report shows exactly what was diffed.
    """
    artifacts = {"staging_path": str(paths.staging), "prod_path": str(paths.prod)}

    missing = [str(p) for p in (paths.staging, paths.prod) if not p.exists()]
    if missing:
        logger.error("Missing file(s) for %s: %s", page_path, ", ".join(missing))
        return ComparisonResult.acquisition_error(
            page_path, f"Missing capture(s): {', '.join(missing)}",
            **{k: v for k, v in artifacts.items() if v not in missing},
        )

    normalized = {}
    for label, path in (("staging", paths.staging), ("prod", paths.prod)):
        try:
            data = codec.normalize(path.read_bytes(), ctx.canvas_width, ctx.canvas_height)
        except DecodeError as e:
            logger.error("Could not decode %s capture for %s: %s", label, page_path, e)
            return ComparisonResult.acquisition_error(
                page_path, f"Unreadable {label} capture: {e}", **artifacts,
            )
        path.write_bytes(data)
        normalized[label] = codec.decode(data)

    staging_img, prod_img = normalized["staging"], normalized["prod"]
    if staging_img.size != prod_img.size:
        # Unreachable while normalization honors the fixed canvas.
        logger.error("Size mismatch for %s after normalization: %s vs %s",
                     page_path, staging_img.size, prod_img.size)
        return ComparisonResult.size_mismatch(
            page_path,
            f"Size mismatch after normalization: staging {staging_img.size[0]}x{staging_img.size[1]}, "
            f"prod {prod_img.size[0]}x{prod_img.size[1]}",
            **artifacts,
        )

    outcome = differ.diff(staging_img, prod_img)
    paths.diff.parent.mkdir(parents=True, exist_ok=True)
    paths.diff.write_bytes(codec.encode(outcome.mask))

    return ComparisonResult.scored(
        page_path,
        similarity=outcome.similarity,
        diff_path=str(paths.diff),
        mismatched_pixels=outcome.mismatched_pixels,
        total_pixels=outcome.total_pixels,
        **artifacts,
    )
