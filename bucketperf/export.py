"""JSON and CSV export for trial records and batch rows."""

from __future__ import annotations

import csv
import io
import json

from bucketperf.config import BATCH_COLUMNS
from bucketperf.models import BatchResult, ResultRecord, ScrapedRow


def export_records_json(records: list[ResultRecord], indent: int = 2) -> str:
    """Export trial records as a JSON array, one object per trial."""
    return json.dumps([r.to_dict() for r in records], indent=indent, ensure_ascii=False)


def export_records_csv(records: list[ResultRecord]) -> str:
    """Export trial records as CSV (one row per trial)."""
    output = io.StringIO()
    writer = csv.writer(output)
    dicts = [r.to_dict() for r in records]
    if not dicts:
        return ""
    writer.writerow(list(dicts[0]))
    for d in dicts:
        writer.writerow(list(d.values()))
    return output.getvalue()


def export_batch_csv(rows: list[ScrapedRow]) -> str:
    """Export scraped batch rows as CSV, each prefixed with its capture time."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["timestamp", "run_id", *BATCH_COLUMNS])
    for row in rows:
        writer.writerow([row.timestamp, row.run_id, *row.cells])
    return output.getvalue()


def export_batch_json(result: BatchResult, indent: int = 2) -> str:
    """Export a batch with its rows keyed by column name and per-run outcomes."""
    data = {
        "rows": [
            {
                "timestamp": row.timestamp,
                "run_id": row.run_id,
                **dict(zip(BATCH_COLUMNS, row.cells)),
            }
            for row in result.rows
        ],
        "runs": [
            {"run_id": o.run_id, "rows": len(o.rows), "error": o.error}
            for o in result.outcomes
        ],
    }
    return json.dumps(data, indent=indent, ensure_ascii=False)


def write_to_file(content: str, filepath: str) -> None:
    """Write export content to a file."""
    with open(filepath, "w", encoding="utf-8", newline="") as f:
        f.write(content)
