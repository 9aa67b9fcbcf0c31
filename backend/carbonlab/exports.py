"""CSV export rendering for record tables."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Any, Iterable, Sequence
from urllib.parse import quote

from fastapi import Response


def csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def value_pair(first: Any, second: Any, separator: str = ",") -> str:
    """Render two related readings as one cell when both are present."""

    if first is None or second is None:
        return ""
    return f"{csv_value(first)}{separator}{csv_value(second)}"


def csv_response(
    headers: Sequence[str],
    rows: Iterable[Sequence[Any]],
    filename: str,
) -> Response:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([csv_value(value) for value in row])
    output.seek(0)
    return Response(
        content=output.read(),
        media_type="text/csv",
        headers={"Content-Disposition": attachment_header(filename)},
    )


def attachment_header(filename: str | None, fallback: str = "report.pdf") -> str:
    """Build a ``Content-Disposition`` value for any uploaded file name.

    Names that are plain ASCII go out as ``filename="..."``. Anything else
    also gets an RFC 5987 ``filename*`` parameter carrying the UTF-8 name,
    with an ASCII-only ``filename`` for clients that ignore it.
    """

    name = (filename or "").strip() or fallback
    quoted = quote(name)
    if quoted == name:
        return f'attachment; filename="{name}"'
    ascii_name = "".join(
        ch for ch in name.encode("ascii", "ignore").decode("ascii")
        if ch.isprintable() and ch not in '"\\'
    ).strip()
    if not ascii_name.split(".")[0].strip():
        ascii_name = fallback
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quoted}"
