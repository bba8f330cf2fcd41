"""CSV export of ranked event records."""
from __future__ import annotations

import csv
import io
from typing import Iterable

from speaking_agent.models.events import EventRecord

EXPORT_FILENAME = "tdp_events.csv"
CSV_COLUMNS: list[str] = list(EventRecord.model_fields)


def records_to_csv(records: Iterable[EventRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for record in records:
        row = record.model_dump()
        row["verticals"] = ", ".join(record.verticals)
        writer.writerow({key: "" if value is None else value for key, value in row.items()})
    return buffer.getvalue()
