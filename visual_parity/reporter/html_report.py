"""HTML report generator: one self-contained file with every capture embedded."""

from __future__ import annotations

import base64
import html
import logging
import time
from pathlib import Path

from visual_parity.models.comparison import PASS_THRESHOLD, ComparisonResult, ComparisonRun, classify
from visual_parity.url_utils import resolve_url

from .ordering import order_for_review, summarize

logger = logging.getLogger(__name__)


def _embed_image(path: str | None) -> str:
    """Read an image file and return a base64 data URI, or empty string on failure."""
    if not path:
        return ""
    try:
        p = Path(path)
        if not p.exists() or p.stat().st_size == 0:
            return ""
        with open(p, "rb") as f:
            data = base64.b64encode(f.read()).decode()
        suffix = p.suffix.lower()
        mime = "image/png" if suffix == ".png" else "image/jpeg" if suffix in (".jpg", ".jpeg") else "image/webp"
        return f"data:{mime};base64,{data}"
    except OSError as e:
        logger.warning("Could not embed %s: %s", path, e)
        return ""


def _image_cell(path: str | None, label: str, css_class: str) -> str:
    data_uri = _embed_image(path)
    if not data_uri:
        return f'''
        <div class="image-wrapper">
          <div class="placeholder">{label} not available</div>
          <div class="image-label {css_class}">{label}</div>
        </div>'''
    return f'''
        <div class="image-wrapper">
          <img src="{data_uri}" alt="{label}" loading="lazy" onclick="this.classList.toggle('zoomed')"/>
          <div class="image-label {css_class}">{label}</div>
        </div>'''


def _build_row(r: ComparisonResult, staging_base: str, prod_base: str) -> str:
    """Build the table row for a single comparison result."""
    status = classify(r)
    similarity = f"{r.similarity:.2f}%" if r.similarity is not None else "Error"
    staging_link = html.escape(resolve_url(staging_base, r.page_path))
    prod_link = html.escape(resolve_url(prod_base, r.page_path))

    detail = ""
    if r.error_message:
        detail = f'<div class="error-detail">{html.escape(r.error_message)}</div>'
    elif r.mismatched_pixels is not None:
        detail = f'<div class="pixel-detail">{r.mismatched_pixels:,} / {r.total_pixels:,} pixels differ</div>'

    return f'''
    <tr class="result-row" data-status="{status}">
      <td class="page-cell">
        <div class="page-path">{html.escape(r.page_path)}</div>
        <a href="{staging_link}" target="_blank" class="staging">Staging</a> |
        <a href="{prod_link}" target="_blank" class="prod">Prod</a>
      </td>
      <td>{similarity}{detail}</td>
      <td><span class="badge {status}">{status.upper()}</span></td>
      <td>
        <div class="image-container">
          {_image_cell(r.staging_path, "Staging", "staging")}
          {_image_cell(r.prod_path, "Prod", "prod")}
          {_image_cell(r.diff_path, "Diff", "diff")}
        </div>
      </td>
    </tr>'''


def assemble_html_report(run: ComparisonRun, generated_at: str | None = None) -> str:
    """Render the full report document for a finished comparison run."""
    generated_at = generated_at or time.strftime("%Y-%m-%d %H:%M:%S")
    summary = summarize(run.results)
    rows = [
        _build_row(r, run.staging_base_url, run.prod_base_url)
        for r in order_for_review(run.results)
    ]
    device = html.escape(run.device)

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Visual Comparison Report &mdash; {device}</title>
<style>
  :root {{ --pass: #22c55e; --fail: #ef4444; --error: #f97316; --staging: #f59e0b; --prod: #2563eb; --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; --accent: #6366f1; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  .container {{ max-width: 1400px; margin: 0 auto; }}
  h1 {{ font-size: 1.8rem; margin-bottom: 0.3rem; }}
  .meta {{ color: var(--muted); margin-bottom: 1.5rem; font-size: 0.9rem; }}
  .meta .staging, .meta .prod {{ font-weight: 600; }}
  /* Summary cards */
  .summary {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(130px, 1fr)); gap: 0.8rem; margin-bottom: 1rem; }}
  .stat {{ background: var(--card); border-radius: 8px; padding: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); text-align: center; }}
  .stat .value {{ font-size: 1.8rem; font-weight: 700; }}
  .stat .label {{ font-size: 0.8rem; color: var(--muted); }}
  .stat.pass .value {{ color: var(--pass); }}
  .stat.fail .value {{ color: var(--fail); }}
  .stat.error .value {{ color: var(--error); }}
  .criteria {{ font-size: 0.88rem; color: var(--muted); margin-bottom: 1rem; }}
  /* Badges */
  .badge {{ display: inline-block; padding: 0.15rem 0.55rem; border-radius: 9999px; font-size: 0.7rem; font-weight: 600; text-transform: uppercase; white-space: nowrap; }}
  .badge.pass {{ background: #dcfce7; color: #166534; }}
  .badge.fail {{ background: #fecaca; color: #991b1b; }}
  .badge.error {{ background: #fed7aa; color: #9a3412; }}
  .staging {{ color: var(--staging); }}
  .prod {{ color: var(--prod); }}
  /* Results table */
  table {{ width: 100%; border-collapse: collapse; background: var(--card); border-radius: 8px; overflow: hidden; box-shadow: 0 1px 3px rgba(0,0,0,0.08); }}
  th, td {{ border-bottom: 1px solid var(--border); padding: 0.6rem; text-align: center; vertical-align: middle; font-size: 0.88rem; }}
  th {{ background: #f1f5f9; font-size: 0.8rem; text-transform: uppercase; letter-spacing: 0.05em; color: var(--muted); }}
  .page-cell {{ text-align: left; }}
  .page-path {{ font-family: monospace; font-size: 0.82rem; word-break: break-all; }}
  .error-detail {{ color: var(--error); font-size: 0.78rem; max-width: 260px; margin: 0.2rem auto 0; word-break: break-word; }}
  .pixel-detail {{ color: var(--muted); font-size: 0.75rem; }}
  /* Images */
  .image-container {{ display: flex; justify-content: center; align-items: flex-start; gap: 0.8rem; }}
  .image-wrapper {{ display: flex; flex-direction: column; align-items: center; }}
  .image-wrapper img {{ width: 300px; border-radius: 6px; border: 1px solid var(--border); cursor: pointer; }}
  .image-wrapper img.zoomed {{ position: fixed; top: 5%; left: 5%; width: 90%; height: 90%; object-fit: contain; z-index: 1000; background: rgba(0,0,0,0.85); border: none; border-radius: 8px; padding: 1rem; }}
  .placeholder {{ width: 300px; height: 187px; display: flex; align-items: center; justify-content: center; border: 1px dashed var(--border); border-radius: 6px; color: var(--muted); font-size: 0.8rem; background: #f8fafc; }}
  .image-label {{ font-size: 0.75rem; font-weight: 600; margin-top: 0.2rem; }}
  /* Filter bar */
  .filter-bar {{ display: flex; gap: 0.5rem; margin-bottom: 1rem; flex-wrap: wrap; }}
  .filter-btn {{ padding: 0.3rem 0.8rem; border-radius: 6px; border: 1px solid var(--border); background: var(--card); cursor: pointer; font-size: 0.82rem; }}
  .filter-btn.active {{ background: var(--accent); color: white; border-color: var(--accent); }}
</style>
</head>
<body>
<div class="container">
  <h1>Visual Comparison Report</h1>
  <p class="meta">Device: {device} &middot;
    <span class="staging">Staging:</span> {html.escape(run.staging_base_url)} &middot;
    <span class="prod">Prod:</span> {html.escape(run.prod_base_url)} &middot;
    Generated: {html.escape(generated_at)} &middot; Run: {html.escape(run.run_id)} &middot; Duration: {run.duration_seconds}s</p>

  <div class="summary">
    <div class="stat"><div class="value">{summary.total}</div><div class="label">Total Pages Tested</div></div>
    <div class="stat pass"><div class="value">{summary.passed}</div><div class="label">Passed</div></div>
    <div class="stat fail"><div class="value">{summary.failed}</div><div class="label">Failed</div></div>
    <div class="stat error"><div class="value">{summary.errors}</div><div class="label">Errors</div></div>
  </div>

  <p class="criteria">Success criteria: a similarity of {PASS_THRESHOLD:g}% or higher is a pass.
    In diff images, <span class="staging">orange</span> marks staging-side differences and
    <span class="prod">blue</span> marks prod-side differences.</p>

  <div class="filter-bar">
    <button class="filter-btn active" onclick="filterRows('all')">All</button>
    <button class="filter-btn" onclick="filterRows('error')">Errors</button>
    <button class="filter-btn" onclick="filterRows('fail')">Failed</button>
    <button class="filter-btn" onclick="filterRows('pass')">Passed</button>
  </div>

  <table>
    <thead>
      <tr><th>Page</th><th>Similarity</th><th>Status</th><th>Images</th></tr>
    </thead>
    <tbody>
      {"".join(rows)}
    </tbody>
  </table>
</div>

<script>
function filterRows(status) {{
  document.querySelectorAll('.filter-btn').forEach(b => b.classList.remove('active'));
  event.target.classList.add('active');
  document.querySelectorAll('.result-row').forEach(row => {{
    row.style.display = status === 'all' || row.dataset.status === status ? '' : 'none';
  }});
}}
</script>
</body>
</html>'''


def generate_html_report(run: ComparisonRun, output_path: Path) -> None:
    """Write the self-contained HTML report for a run."""
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(assemble_html_report(run))
