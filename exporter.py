"""
CSV and Excel export of an analysis report.
"""

import logging
from typing import Any, Dict, List, Sequence

import pandas as pd

from core.constants import FLAG_DELIMITER, SUSPICIOUS_THRESHOLD
from scoring.aggregator import Summary
from scoring.models import ScoredComment

logger = logging.getLogger(__name__)

_COMMENT_COLUMNS = [
    "Comment ID",
    "Author Name",
    "Comment Text",
    "Comment Date",
    "Comment Likes",
    "Bot Score",
    "Suspicious",
    "Flags",
    "AI Score",
    "AI Label",
    "AI Reason",
]


def scored_to_rows(
    scored: Sequence[ScoredComment],
    threshold: int = SUSPICIOUS_THRESHOLD,
) -> List[Dict[str, Any]]:
    """Flatten scored comments into export rows, one per comment."""
    rows = []
    for item in scored:
        comment = item.comment
        opinion = item.opinion
        rows.append({
            "Comment ID": comment.comment_id,
            "Author Name": comment.author_name,
            "Comment Text": comment.text,
            "Comment Date": comment.published_at,
            "Comment Likes": comment.like_count,
            "Bot Score": item.bot_score,
            "Suspicious": item.is_suspicious(threshold),
            "Flags": FLAG_DELIMITER.join(item.flags),
            "AI Score": opinion.score if opinion and opinion.score is not None else "",
            "AI Label": opinion.label.value if opinion else "",
            "AI Reason": opinion.reason if opinion else "",
        })
    return rows


def summary_to_rows(summary: Summary, video_id: str = "", verdict=None) -> List[Dict[str, Any]]:
    """Key/value rows for the summary sheet."""
    rows = [
        {"Metric": "Video ID", "Value": video_id},
        {"Metric": "Total Comments", "Value": summary.total},
        {"Metric": "Suspicious", "Value": summary.suspicious},
        {"Metric": "Suspicious %", "Value": summary.suspicious_pct},
        {"Metric": "Threshold", "Value": summary.threshold},
    ]
    if verdict is not None:
        rows.append({"Metric": "AI Verdict", "Value": verdict.label.value})
        rows.append({"Metric": "AI Confidence", "Value": "" if verdict.confidence is None else verdict.confidence})
    return rows


def save_to_csv(
    scored: Sequence[ScoredComment],
    filename: str,
    threshold: int = SUSPICIOUS_THRESHOLD,
) -> str:
    """
    Save scored comments to a CSV file.

    Args:
        scored: Scored comments in presentation order
        filename: Output path
        threshold: Suspicious threshold for the "Suspicious" column

    Returns:
        Filename used
    """
    encoding = "utf-8-sig"  # BOM for Excel compatibility
    df = pd.DataFrame(scored_to_rows(scored, threshold), columns=_COMMENT_COLUMNS)
    df.to_csv(filename, index=False, encoding=encoding)
    logger.info(f"Saved {len(df)} rows to {filename}")
    return filename


def save_to_excel(report, filename: str) -> str:
    """
    Save an AnalysisReport to an Excel workbook.

    Sheets: "Summary", "Comments", "Top Flags".

    Returns:
        Filename used
    """
    summary = report.summary
    with pd.ExcelWriter(filename, engine="openpyxl") as writer:
        pd.DataFrame(summary_to_rows(summary, report.video_id, report.verdict)).to_excel(
            writer, sheet_name="Summary", index=False
        )
        pd.DataFrame(
            scored_to_rows(report.comments, report.threshold), columns=_COMMENT_COLUMNS
        ).to_excel(writer, sheet_name="Comments", index=False)
        pd.DataFrame(
            [{"Flag": f.flag, "Count": f.count} for f in summary.top_flags],
            columns=["Flag", "Count"],
        ).to_excel(writer, sheet_name="Top Flags", index=False)

    logger.info(f"Saved report for {report.video_id} to {filename}")
    return filename
