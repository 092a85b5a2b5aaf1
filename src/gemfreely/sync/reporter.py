"""Sync report formatting functions.

Provides human-readable and machine-readable output for sync runs:

- ``format_sync_report`` -- full post-sync summary.
- ``format_dry_run_preview`` -- dry-run preview grouped by action.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from collections import defaultdict

from .models import OutcomeKind, SkipReason, SyncOutcome, SyncReport

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def _describe(outcome: SyncOutcome) -> str:
    label = outcome.sync_key
    if outcome.title:
        label += f" ({outcome.title})"
    return label


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Sections are only included when they contain at least one outcome.
    Up-to-date entries are summarised by count only.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = f"Sync report for collection '{report.collection}'"
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Feed: {report.feed_url}")
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    counts = report.counts()
    lines.append(
        f"Processed {len(report.outcomes)} entries: "
        f"{counts['published']} published, {counts['updated']} updated, "
        f"{counts['skipped']} skipped, {counts['failed']} failed"
    )
    lines.append("")

    if report.published:
        lines.append("Published:")
        for o in report.published:
            lines.append(f"  {_describe(o)} -> post {o.remote_post_id}")
        lines.append("")

    if report.updated:
        lines.append("Updated:")
        for o in report.updated:
            lines.append(f"  {_describe(o)} -> post {o.remote_post_id}")
        lines.append("")

    _append_duplicates(lines, report)

    if report.failed:
        lines.append("Failed:")
        for o in report.failed:
            kind = o.error_kind.value if o.error_kind else "internal"
            lines.append(f"  {_describe(o)} [{kind}]: {o.error}")
        lines.append("")

    if report.skipped:
        lines.append(f"Up to date: {len(report.skipped)} entries")
        lines.append("")

    return "\n".join(lines).rstrip()


def _append_duplicates(lines: list[str], report: SyncReport) -> None:
    if not report.duplicates:
        return
    lines.append("Duplicate posts (left untouched):")
    for sync_key, post_id in report.duplicates:
        lines.append(f"  {sync_key}: post {post_id}")
    lines.append("")


# ------------------------------------------------------------------
# Dry-run preview
# ------------------------------------------------------------------


def format_dry_run_preview(report: SyncReport) -> str:
    """Format a dry-run preview grouped by outcome.

    Each proposed change is shown as ``sync_key -> post id``.

    Args:
        report: A dry-run sync report (``dry_run=True``).

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append("DRY RUN -- No changes will be made")
    lines.append(f"Collection: {report.collection}")
    lines.append(f"Feed: {report.feed_url}")
    lines.append("")

    groups: dict[OutcomeKind, list[SyncOutcome]] = defaultdict(list)
    for o in report.outcomes:
        groups[o.kind].append(o)

    labels = {
        OutcomeKind.PUBLISHED: "CREATE",
        OutcomeKind.UPDATED: "UPDATE",
        OutcomeKind.FAILED: "FAILED",
    }
    for kind, label in labels.items():
        if kind not in groups:
            continue
        lines.append(f"[{label}]")
        for o in groups[kind]:
            target = f" -> post {o.remote_post_id}" if o.remote_post_id else ""
            error = f": {o.error}" if o.error else ""
            lines.append(f"  {_describe(o)}{target}{error}")
        lines.append("")

    skip_count = len(groups.get(OutcomeKind.SKIPPED, []))
    if skip_count > 0:
        lines.append(f"Skipped: {skip_count} (up to date)")
        lines.append("")

    _append_duplicates(lines, report)

    if not any(k in groups for k in (OutcomeKind.PUBLISHED, OutcomeKind.UPDATED)):
        lines.append("No changes needed.")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a structured dict for JSON serialisation.

    Args:
        report: The sync report.

    Returns:
        Dict with run info, counts, failures, duplicate posts and
        per-outcome details.
    """
    outcomes_list = []
    for o in report.outcomes:
        item: dict = {
            "sync_key": o.sync_key,
            "title": o.title,
            "outcome": o.kind.value,
        }
        if o.remote_post_id:
            item["post_id"] = o.remote_post_id
        if o.reason:
            item["reason"] = o.reason.value
        if o.error_kind:
            item["error_kind"] = o.error_kind.value
        if o.error:
            item["error"] = o.error
        if o.duplicate_post_ids:
            item["duplicate_post_ids"] = list(o.duplicate_post_ids)
        outcomes_list.append(item)

    return {
        "collection": report.collection,
        "feed_url": report.feed_url,
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "counts": report.counts(),
        "failures": [
            {"sync_key": key, "error_kind": kind.value}
            for key, kind in report.failures
        ],
        "duplicates": [
            {
                "sync_key": key,
                "post_id": post_id,
                "reason": SkipReason.DUPLICATE_REMOTE.value,
            }
            for key, post_id in report.duplicates
        ],
        "outcomes": outcomes_list,
    }
