"""HTML report generator for preset benchmark results."""

import html
from datetime import datetime
from typing import Sequence

from .evaluation.quality import BenchmarkResult, calculate_quality
from .strategy import Strategy


def generate_report(
    results: Sequence[BenchmarkResult],
    output_path: str,
    file_name: str = "unknown",
    input_size: int = 0,
    strategy=Strategy.BALANCED,
) -> None:
    """Write a standalone HTML page comparing presets.

    Args:
        results: Benchmark results, one per preset.
        output_path: Path to write the HTML file.
        file_name: Name of the benchmarked input, shown in the header.
        input_size: Input size in bytes.
        strategy: Strategy used to grade each preset.
    """
    strategy = Strategy.parse(strategy)
    entries = []
    for r in results:
        entries.append((r, calculate_quality(r, strategy)))

    # Best overall score first
    entries.sort(key=lambda e: e[1].overall_score, reverse=True)

    # Bars show space saved, so smaller ratios get longer bars
    max_saving = max((1.0 - r.compression_ratio for r, _ in entries), default=1.0)

    rows_html = ""
    for i, (r, q) in enumerate(entries):
        saving = max(1.0 - r.compression_ratio, 0.0)
        bar_pct = (saving / max(max_saving, 0.01)) * 100
        medal = ""
        if i == 0:
            medal = " &#x1f947;"  # gold
        elif i == 1:
            medal = " &#x1f948;"  # silver
        elif i == 2:
            medal = " &#x1f949;"  # bronze

        cls = "best-row" if i == 0 else "std-row"
        rows_html += f"""        <tr class="{cls}">
            <td>Preset {r.preset}{medal}</td>
            <td>{r.output_size_bytes:,}</td>
            <td><strong>{r.compression_ratio:.4f}</strong></td>
            <td>
                <div class="bar-container">
                    <div class="bar" style="width:{bar_pct:.1f}%"></div>
                </div>
            </td>
            <td>{r.compression_speed_mbps:.1f} / {r.decompression_speed_mbps:.1f} MB/s</td>
            <td>{r.memory_used_mb} MB</td>
            <td>{q.overall_score:.1f} ({html.escape(q.grade)})</td>
        </tr>
"""

    report_html = f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>xzadvisor Benchmark Report</title>
<style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
        font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
        background: #0d1117; color: #c9d1d9; padding: 2rem;
    }}
    .container {{ max-width: 960px; margin: 0 auto; }}
    h1 {{ color: #58a6ff; margin-bottom: 0.5rem; font-size: 1.8rem; }}
    .subtitle {{ color: #8b949e; margin-bottom: 2rem; }}
    .meta {{ background: #161b22; border: 1px solid #30363d; border-radius: 8px;
             padding: 1rem 1.5rem; margin-bottom: 2rem; display: flex; gap: 2rem; flex-wrap: wrap; }}
    .meta-label {{ color: #8b949e; font-size: 0.85rem; }}
    .meta-value {{ color: #c9d1d9; font-size: 1.1rem; font-weight: 600; }}
    table {{ width: 100%; border-collapse: collapse; background: #161b22;
             border: 1px solid #30363d; border-radius: 8px; overflow: hidden; }}
    th {{ background: #21262d; color: #8b949e; padding: 0.75rem 1rem; text-align: left;
          font-size: 0.85rem; text-transform: uppercase; letter-spacing: 0.05em; }}
    td {{ padding: 0.65rem 1rem; border-top: 1px solid #21262d; }}
    .best-row td:first-child {{ color: #58a6ff; font-weight: 600; }}
    .std-row td:first-child {{ color: #8b949e; }}
    .bar-container {{ width: 100%; height: 20px; background: #21262d; border-radius: 4px; overflow: hidden; }}
    .bar {{ height: 100%; border-radius: 4px; background: linear-gradient(90deg, #1f6feb, #58a6ff); }}
    .footer {{ margin-top: 2rem; color: #484f58; font-size: 0.8rem; text-align: center; }}
</style>
</head>
<body>
<div class="container">
    <h1>xzadvisor Benchmark Report</h1>
    <p class="subtitle">xz preset comparison, graded for the {html.escape(strategy.value)} strategy</p>

    <div class="meta">
        <div class="meta-item">
            <div class="meta-label">File</div>
            <div class="meta-value">{html.escape(file_name)}</div>
        </div>
        <div class="meta-item">
            <div class="meta-label">Input Size</div>
            <div class="meta-value">{_fmt_size(input_size)}</div>
        </div>
        <div class="meta-item">
            <div class="meta-label">Presets</div>
            <div class="meta-value">{len(entries)}</div>
        </div>
        <div class="meta-item">
            <div class="meta-label">Generated</div>
            <div class="meta-value">{datetime.now().strftime('%Y-%m-%d %H:%M')}</div>
        </div>
    </div>

    <table>
        <thead>
            <tr>
                <th>Preset</th>
                <th>Compressed Size</th>
                <th>Ratio</th>
                <th>Space Saved</th>
                <th>Speed (c / d)</th>
                <th>Memory</th>
                <th>Score</th>
            </tr>
        </thead>
        <tbody>
{rows_html}        </tbody>
    </table>

    <div class="footer">Generated by xzadvisor</div>
</div>
</body>
</html>
"""
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report_html)


def _fmt_size(n: int) -> str:
    """Format byte count as human-readable string."""
    if n < 1024:
        return f"{n} B"
    elif n < 1024 * 1024:
        return f"{n / 1024:.1f} KB"
    elif n < 1024 * 1024 * 1024:
        return f"{n / (1024 * 1024):.1f} MB"
    else:
        return f"{n / (1024 * 1024 * 1024):.1f} GB"
