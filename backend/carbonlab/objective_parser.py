"""Split pasted experiment write-ups into objective sections."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass

# purpose: turn a free-text report into the five objective fields stored on graphene records
# inputs: arbitrary pasted text, typically copied from a weekly update or lab notebook
# outputs: ParsedObjective or None when no section label is recognized
# status: active

FIELD_LABELS: tuple[tuple[str, str, str], ...] = (
    ("objective", r"objectives?", "Objective"),
    ("experiment_details", r"experiment[ \t]*details?", "Experiment details"),
    ("result", r"results?", "Result"),
    ("conclusion", r"conclusions?", "Conclusion"),
    ("recommended_action", r"recommended[ \t]*actions?", "Recommended action"),
)

_FIELD_NAMES = tuple(name for name, _, _ in FIELD_LABELS)
_PRIMARY_FIELDS = ("objective", "experiment_details", "result")

# a label counts only when followed by a colon, whitespace, or the end of the line
_LABEL_TAIL = r"(?:[ \t]*:|(?=[ \t]|$))"
_LABEL_ALTERNATION = "|".join(
    f"(?P<{name}>{pattern})" for name, pattern, _ in FIELD_LABELS
)
_HEADER_RE = re.compile(
    rf"^[ \t]*(?:{_LABEL_ALTERNATION}){_LABEL_TAIL}[ \t]*",
    re.IGNORECASE | re.MULTILINE,
)
_LINE_HEADER_RES = tuple(
    (name, re.compile(rf"^{pattern}{_LABEL_TAIL}\s*", re.IGNORECASE))
    for name, pattern, _ in FIELD_LABELS
)
_INDENT_RE = re.compile(r"\n\s+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class ParsedObjective:
    """Five independent sections of a pasted report; any may be empty."""

    objective: str = ""
    experiment_details: str = ""
    result: str = ""
    conclusion: str = ""
    recommended_action: str = ""

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in _FIELD_NAMES)

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


def _clean(value: str) -> str:
    value = value.strip()
    value = _INDENT_RE.sub("\n", value)
    return _BLANK_RUN_RE.sub("\n\n", value)


def _structured_pass(text: str) -> dict[str, str]:
    """Capture each label's first occurrence up to the next label of any kind."""

    headers = list(_HEADER_RE.finditer(text))
    found: dict[str, str] = {}
    for index, match in enumerate(headers):
        field = match.lastgroup
        if field is None or field in found:
            continue
        end = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        found[field] = _clean(text[match.end():end])
    return found


def _line_scan_pass(text: str) -> dict[str, str]:
    """Walk the text line by line, switching section on every label line."""

    found: dict[str, str] = {}
    current: str | None = None
    buffer: list[str] = []

    def flush() -> None:
        if current is not None and current not in found:
            found[current] = _clean("\n".join(buffer))

    for line in text.split("\n"):
        stripped = line.strip()
        for field, header_re in _LINE_HEADER_RES:
            header = header_re.match(stripped)
            if header:
                flush()
                current = field
                buffer = [stripped[header.end():]]
                break
        else:
            if current is not None and stripped:
                buffer.append(line)
    flush()
    return found


def parse_objective_text(text: object) -> ParsedObjective | None:
    """Parse pasted text into objective sections.

    Labels are matched case-insensitively at the start of a line, with an
    optional colon. When a label repeats, its first occurrence is used and
    every section ends at the next label line of any kind. Returns ``None``
    when nothing was recognized; never raises.
    """

    if not text or not isinstance(text, str):
        return None
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    fields = {name: "" for name in _FIELD_NAMES}
    for field, value in _structured_pass(text).items():
        fields[field] = value

    if not any(fields[name] for name in _PRIMARY_FIELDS):
        for field, value in _line_scan_pass(text).items():
            if not fields[field]:
                fields[field] = value

    parsed = ParsedObjective(**fields)
    return None if parsed.is_empty() else parsed


def format_objective_text(parsed: ParsedObjective | None) -> str:
    """Render parsed sections back into labelled text, skipping empty ones."""

    if parsed is None:
        return ""
    lines = []
    for name, _, label in FIELD_LABELS:
        value = getattr(parsed, name)
        if value:
            lines.append(f"{label}: {value}")
    return "\n".join(lines)
