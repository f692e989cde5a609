"""CSV report building: pure, no file I/O.

The report is a small free-form header (metadata and session bounds)
followed by one ``Category,Condition,Minutes`` row per tracked condition.
Durations are always written as ``M:SS``.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime

REPORT_TITLE = "Ride Data Logger Report"
REPORT_MIME_TYPE = "text/csv;charset=utf-8"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Commas would shift columns and line breaks would start new rows.
_SEPARATORS = re.compile(r"\r\n|[,\r\n]")


def format_duration(ms):
    """Format milliseconds as M:SS.  Minutes are unbounded (75:03), seconds
    are floored and zero padded."""
    total_seconds = max(0, int(ms)) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def report_file_name(when):
    return f"RideData_{when:%Y-%m-%d}_{when:%H-%M-%S}.csv"


def neutralize(text):
    """Replace field/row separators in free text with a space."""
    return _SEPARATORS.sub(" ", text)


@dataclass(frozen=True)
class TabularReport:
    file_name: str
    text: str
    rows: list = field(default_factory=list)
    mime_type: str = REPORT_MIME_TYPE

    @property
    def payload(self):
        return self.text.encode("utf-8")


def build_report(session, form_fields, ledger_snapshot, comment="", generated_at=None):
    """Build the report for one finished session.

    ``session`` is a SessionWindow, ``form_fields`` an ordered mapping of
    metadata, ``ledger_snapshot`` an ordered list of (ConditionKey, ms).
    The file name is stamped with ``generated_at`` (defaults to the session
    end).
    """
    lines = [REPORT_TITLE, ""]
    for name, value in form_fields.items():
        lines.append(f"{name},{neutralize(str(value))}")
    lines.append(f"Session Start,{session.start.strftime(TIMESTAMP_FORMAT)}")
    lines.append(f"Session End,{session.end.strftime(TIMESTAMP_FORMAT)}")
    lines.append(f"Session Duration,{format_duration(session.duration_ms)}")
    lines.append("")
    lines.append("Category,Condition,Minutes")

    rows = []
    for key, ms in ledger_snapshot:
        row = (key.category, key.condition, format_duration(ms))
        rows.append(row)
        lines.append(",".join(row))

    if comment and comment.strip():
        lines.append("")
        lines.append(f"Comment,{neutralize(comment)}")

    stamp = generated_at if generated_at is not None else session.end
    return TabularReport(
        file_name=report_file_name(stamp),
        text="\n".join(lines) + "\n",
        rows=rows,
    )
