"""
Ticket export for the ``export`` bulk operation.

Projects tickets to flat records restricted to the requested fields and
serializes them as CSV or JSON text. Delivering the payload (a file
download, an attachment) is left to the caller.
"""

import csv
import io
import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Sequence

from config.settings import get_settings
from ..models import ExportFormat, ExportParams, ExportPayload, Ticket

logger = logging.getLogger(__name__)


EXPORT_FIELDS: List[Dict[str, str]] = [
    {"key": "id", "label": "ID", "description": "Ticket ID"},
    {"key": "key", "label": "Key", "description": "Ticket Key"},
    {"key": "title", "label": "Title", "description": "Ticket Title"},
    {"key": "description", "label": "Description", "description": "Ticket Description"},
    {"key": "status", "label": "Status", "description": "Current Status"},
    {"key": "priority", "label": "Priority", "description": "Priority Level"},
    {"key": "assignee", "label": "Assignee", "description": "Assigned User"},
    {"key": "reporter", "label": "Reporter", "description": "Ticket Reporter"},
    {"key": "labels", "label": "Labels", "description": "Ticket Labels"},
    {"key": "story_points", "label": "Story Points", "description": "Story Points"},
    {"key": "created", "label": "Created", "description": "Creation Date"},
    {"key": "updated", "label": "Updated", "description": "Last Updated"},
]

DEFAULT_EXPORT_FIELDS = ["key", "title", "status", "priority", "assignee", "labels", "story_points"]

_LABELS = {f["key"]: f["label"] for f in EXPORT_FIELDS}

# format -> (extension, mime type)
_FORMAT_TARGETS = {
    ExportFormat.CSV.value: ("csv", "text/csv"),
    ExportFormat.JSON.value: ("json", "application/json"),
    # Spreadsheet apps open CSV text; no real workbook container is produced
    ExportFormat.EXCEL.value: ("csv", "application/vnd.ms-excel"),
}


def get_field_value(ticket: Ticket, field: str) -> Any:
    """Flat export value of one ticket field. Unknown fields export as ''."""
    if field == "labels":
        return ", ".join(ticket.labels)
    if field not in _LABELS:
        return ""

    value = getattr(ticket, field, None)
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def project_tickets(tickets: Sequence[Ticket], fields: Sequence[str]) -> List[Dict[str, Any]]:
    """Flat records with keys in requested field order."""
    return [{field: get_field_value(ticket, field) for field in fields} for ticket in tickets]


def header_for(field: str) -> str:
    return _LABELS.get(field) or field[:1].upper() + field[1:]


def to_csv(tickets: Sequence[Ticket], fields: Sequence[str], delimiter: str = ",") -> str:
    """CSV with a header row; values containing the delimiter are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow([header_for(f) for f in fields])
    for record in project_tickets(tickets, fields):
        writer.writerow([record[f] for f in fields])

    content = buffer.getvalue()
    return content[:-1] if content.endswith("\n") else content


def to_json(tickets: Sequence[Ticket], fields: Sequence[str]) -> str:
    return json.dumps(project_tickets(tickets, fields), indent=2, ensure_ascii=False)


def export_tickets(tickets: Sequence[Ticket], params: ExportParams) -> ExportPayload:
    """
    Serialize tickets according to export parameters.

    Raises:
        ValueError: if the format is not supported
    """
    fmt = str(getattr(params.format, "value", params.format))
    fields = list(params.include_fields)

    if fmt == ExportFormat.JSON.value:
        content = to_json(tickets, fields)
    elif fmt in (ExportFormat.CSV.value, ExportFormat.EXCEL.value):
        content = to_csv(tickets, fields)
    else:
        raise ValueError(f"Unsupported export format: {fmt}")

    extension, mime_type = _FORMAT_TARGETS[fmt]
    filename = f"{get_settings().export_filename_stem}.{extension}"

    logger.info(f"Exported {len(tickets)} tickets as {fmt.upper()} ({len(content)} chars)")
    return ExportPayload(content=content, filename=filename, mime_type=mime_type, format=fmt)
