"""`/oncall` command handling: parsing, matching and incident creation."""
from .commands import CommandStatus, IncidentRequest, ParsedCommand, is_command, parse_command, strip_html
from .orchestrator import CreationOutcome, IncidentOrchestrator, OrchestrationResult

__all__ = [
    "CommandStatus",
    "IncidentRequest",
    "ParsedCommand",
    "is_command",
    "parse_command",
    "strip_html",
    "CreationOutcome",
    "IncidentOrchestrator",
    "OrchestrationResult",
]
