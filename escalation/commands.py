"""Parsing of `/oncall` commands posted as Chatwoot private notes."""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

COMMAND_PREFIX = "/oncall"

_FIELD_RE = re.compile(r"^(\w[\w\s]*):\s*(.+)$")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_CLOSE_RE = re.compile(r"</p>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")

# &amp; last so "&amp;lt;" decodes to "&lt;", not "<"
_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


class CommandStatus(str, Enum):
    """Outcome of parsing a note."""
    OK = "ok"
    NOT_A_COMMAND = "not_a_command"
    MISSING_SEVERITY = "missing_severity"


@dataclass(frozen=True)
class IncidentRequest:
    """Structured `/oncall` request."""
    severity: str
    team: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class ParsedCommand:
    status: CommandStatus
    request: Optional[IncidentRequest] = None

    @property
    def ok(self) -> bool:
        return self.status == CommandStatus.OK


def strip_html(html: str) -> str:
    """
    Recover plain text from Chatwoot's HTML-wrapped message content.

    `<br>` and `</p>` become newlines, every other tag is dropped and the
    common entities are decoded.
    """
    text = _BR_RE.sub("\n", html)
    text = _P_CLOSE_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text.strip()


def _first_line(text: str) -> Optional[str]:
    for line in text.split("\n"):
        line = line.strip()
        if line:
            return line
    return None


def is_command(text: str) -> bool:
    """True when the first non-empty line starts with the trigger token."""
    first = _first_line(text)
    return first is not None and first.lower().startswith(COMMAND_PREFIX)


def parse_command(text: str) -> ParsedCommand:
    """
    Parse a plain-text note into an IncidentRequest.

    Lines after the trigger are read as `key: value` pairs; unrecognised lines
    are skipped and a repeated key keeps its last value.

    Args:
        text: Note content with HTML already stripped

    Returns:
        ParsedCommand; `request` is set only when status is OK
    """
    if not is_command(text):
        return ParsedCommand(CommandStatus.NOT_A_COMMAND)

    lines = [line.strip() for line in text.split("\n")]
    while lines and not lines[0]:
        lines.pop(0)

    fields: Dict[str, str] = {}
    for line in lines[1:]:
        match = _FIELD_RE.match(line)
        if match:
            fields[match.group(1).strip().lower()] = match.group(2).strip()

    if not fields.get("severity"):
        return ParsedCommand(CommandStatus.MISSING_SEVERITY)

    return ParsedCommand(
        CommandStatus.OK,
        IncidentRequest(
            severity=fields["severity"],
            team=fields.get("team") or None,
            title=fields.get("title") or None,
        )
    )
