"""Render a `HealthCheckResult` as text.

Every renderer is a pure function of the result: the only time-dependent values in the
output are the timestamp and duration already stored on the result.
"""

from __future__ import annotations

import csv
import html as html_lib
import io
from enum import Enum
from typing import Callable, Dict, List, Union

from .errors import UnknownReportFormatError
from .models import HealthCheckResult, Issue, Severity

ALL_CLEAR_MESSAGE = "All records passed validation. No data quality issues were found."
DETAILS_PREVIEW_CHARS = 200

SEVERITY_COLORS = {
    Severity.CRITICAL: "#dc3545",
    Severity.HIGH: "#fd7e14",
    Severity.MEDIUM: "#ffc107",
    Severity.LOW: "#28a745",
    Severity.INFO: "#17a2b8",
}


class ReportFormat(str, Enum):
    STRUCTURED = "structured"
    TABULAR = "tabular"
    STYLED_DOCUMENT = "styled-document"
    PLAIN_TEXT = "plain-text"


_FORMAT_ALIASES = {
    "json": ReportFormat.STRUCTURED,
    "csv": ReportFormat.TABULAR,
    "html": ReportFormat.STYLED_DOCUMENT,
    "text": ReportFormat.PLAIN_TEXT,
    "txt": ReportFormat.PLAIN_TEXT,
}


def parse_format(value: Union[ReportFormat, str]) -> ReportFormat:
    if isinstance(value, ReportFormat):
        return value
    key = (value or "").strip().lower()
    if key in _FORMAT_ALIASES:
        return _FORMAT_ALIASES[key]
    try:
        return ReportFormat(key)
    except ValueError:
        expected = ", ".join(f.value for f in ReportFormat)
        raise UnknownReportFormatError(f"Unknown report format '{value}' (expected one of: {expected}).") from None


def generate_report(result: HealthCheckResult, fmt: Union[ReportFormat, str] = ReportFormat.STYLED_DOCUMENT) -> str:
    return _RENDERERS[parse_format(fmt)](result)


def render_structured(result: HealthCheckResult) -> str:
    return result.model_dump_json(indent=2)


def render_tabular(result: HealthCheckResult) -> str:
    """One header line plus one row per (category, issue)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(["Category", "Description", "Severity", "Count", "Details"])
    for _, category, issue in result.iter_issues():
        writer.writerow(
            [
                _one_line(category.name),
                _one_line(issue.description),
                issue.severity.value,
                issue.count,
                _one_line(issue.details_text()),
            ]
        )
    return buffer.getvalue()


def _one_line(text: str) -> str:
    return " ".join(text.splitlines())


def render_plain_text(result: HealthCheckResult) -> str:
    summary = result.summary
    rule = "=" * 50
    lines: List[str] = [
        "=" * 78,
        "FARM RECORDS HEALTH CHECK REPORT".center(78),
        result.timestamp.isoformat().center(78),
        "=" * 78,
        "",
        "SUMMARY:",
        f"Total Issues: {summary.total_issues}",
        f"Critical: {summary.critical_issues}",
        f"High: {summary.high_issues}",
        f"Medium: {summary.medium_issues}",
        f"Low: {summary.low_issues}",
        f"Info: {summary.info_issues}",
        f"Duration: {result.duration_ms}ms",
        "",
    ]

    if not result.has_issues:
        lines.append(ALL_CLEAR_MESSAGE)
        lines.append("")
    else:
        for category in result.categories.values():
            if not category.issues:
                continue
            lines.append(category.name.upper())
            lines.append(rule)
            for issue in category.issues:
                lines.append(f"[{issue.severity.value}] {issue.description} ({issue.count} items)")
                for finding in issue.findings:
                    lines.append(f"   - {finding.summary()}")
                if issue.recommendations:
                    lines.append("   Recommendations:")
                    lines.extend(f"      * {rec}" for rec in issue.recommendations)
                lines.append("")

    if result.recommendations:
        lines.append("OVERALL RECOMMENDATIONS")
        lines.append(rule)
        lines.extend(f"* {rec}" for rec in result.recommendations)

    return "\n".join(lines) + "\n"


_HTML_STYLE = """
    body { font-family: Arial, sans-serif; margin: 20px; background: #f8f9fa; }
    .header { background: #2E7D2E; color: white; padding: 20px; border-radius: 8px; margin-bottom: 20px; }
    .summary { display: grid; grid-template-columns: repeat(auto-fit, minmax(160px, 1fr)); gap: 15px; margin-bottom: 30px; }
    .summary-card { background: white; padding: 20px; border-radius: 8px; text-align: center; }
    .category { background: white; margin-bottom: 20px; border-radius: 8px; overflow: hidden; }
    .category-header { background: #e9ecef; padding: 15px; font-weight: bold; }
    .issue { padding: 15px; border-bottom: 1px solid #dee2e6; }
    .severity { display: inline-block; padding: 4px 8px; border-radius: 4px; color: white; font-size: 12px; font-weight: bold; }
    .details { margin-top: 10px; font-size: 14px; color: #6c757d; }
    .recommendations { background: #e7f3ff; padding: 15px; margin-top: 10px; border-radius: 4px; }
    .all-clear { background: #d4edda; color: #155724; padding: 20px; border-radius: 8px; margin-bottom: 20px; }
"""


def _esc(value: object) -> str:
    return html_lib.escape(str(value), quote=True)


def _html_issue(issue: Issue) -> str:
    details = issue.details_text()
    if len(details) > DETAILS_PREVIEW_CHARS:
        details = details[:DETAILS_PREVIEW_CHARS] + "..."
    parts = [
        '<div class="issue">',
        "<div>",
        f'<span class="severity" style="background-color: {SEVERITY_COLORS[issue.severity]}">'
        f"{_esc(issue.severity.value)}</span>",
        f" <strong>{_esc(issue.description)}</strong>",
        f' <span style="color: #6c757d;">({issue.count} items)</span>',
        "</div>",
        f'<div class="details">{_esc(details)}</div>',
    ]
    if issue.recommendations:
        parts.append('<div class="recommendations"><strong>Recommendations:</strong><ul>')
        parts.extend(f"<li>{_esc(rec)}</li>" for rec in issue.recommendations)
        parts.append("</ul></div>")
    parts.append("</div>")
    return "\n".join(parts)


def render_styled_document(result: HealthCheckResult) -> str:
    summary = result.summary
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        "<title>Farm Records Health Check Report</title>",
        f"<style>{_HTML_STYLE}</style>",
        "</head>",
        "<body>",
        '<div class="header">',
        "<h1>Farm Records Health Check Report</h1>",
        f'<div class="timestamp">Generated: {_esc(result.timestamp.isoformat())}</div>',
        f"<div>Duration: {result.duration_ms}ms | Total Issues: {summary.total_issues}</div>",
        "</div>",
        '<div class="summary">',
    ]
    for severity in Severity:
        parts.append(
            f'<div class="summary-card"><h3 style="color: {SEVERITY_COLORS[severity]};">'
            f"{severity.value.title()}</h3>"
            f'<div style="font-size: 24px; font-weight: bold;">{summary.count_for(severity)}</div></div>'
        )
    parts.append("</div>")

    if not result.has_issues:
        parts.append(f'<div class="all-clear"><strong>{_esc(ALL_CLEAR_MESSAGE)}</strong></div>')
    else:
        for category in result.categories.values():
            if not category.issues:
                continue
            parts.append('<div class="category">')
            parts.append(
                f'<div class="category-header">{_esc(category.name)} ({len(category.issues)} issues)</div>'
            )
            parts.extend(_html_issue(issue) for issue in category.issues)
            parts.append("</div>")

    if result.recommendations:
        parts.append('<div class="category"><div class="category-header">Overall Recommendations</div>')
        parts.append('<div class="issue"><ul>')
        parts.extend(f"<li>{_esc(rec)}</li>" for rec in result.recommendations)
        parts.append("</ul></div></div>")

    parts.extend(["</body>", "</html>"])
    return "\n".join(parts) + "\n"


_RENDERERS: Dict[ReportFormat, Callable[[HealthCheckResult], str]] = {
    ReportFormat.STRUCTURED: render_structured,
    ReportFormat.TABULAR: render_tabular,
    ReportFormat.STYLED_DOCUMENT: render_styled_document,
    ReportFormat.PLAIN_TEXT: render_plain_text,
}
