"""Markdown notes posted back into Chatwoot conversations."""
from typing import Optional, Sequence


def unknown_severity(requested: str, available: Sequence[str]) -> str:
    return f'**OneUptime:** Unknown severity "{requested}". Available: {", ".join(available)}'


def unknown_team(requested: str, available: Sequence[str]) -> str:
    return (
        f'**OneUptime:** Unknown team/on-call policy "{requested}". '
        f'Available: {", ".join(available)}'
    )


def missing_created_state(flagged_count: int) -> str:
    if flagged_count > 1:
        problem = f"Found {flagged_count} incident states flagged as the Created state, expected exactly one."
    else:
        problem = "Could not find the Created incident state."
    return f"**OneUptime:** {problem} Check your OneUptime project configuration."


def integration_error(error: Exception) -> str:
    return f"**OneUptime Integration Error**\n\nFailed to create incident: {error}"


def incident_created(
    incident_id: str,
    severity_name: str,
    status_name: str,
    incident_url: str,
    team_name: Optional[str] = None
) -> str:
    """Confirmation note with a field table for a newly created incident."""
    lines = [
        "**Incident Created in OneUptime**",
        "",
        "| Field | Value |",
        "|-------|-------|",
        f"| **Incident ID** | `{incident_id}` |",
        f"| **Severity** | {severity_name} |",
        f"| **Status** | {status_name} |",
    ]
    if team_name:
        lines.append(f"| **On-Call Team** | {team_name} |")
    lines.append(f"| **Link** | [View in OneUptime]({incident_url}) |")
    return "\n".join(lines)


def status_changed(old_name: str, new_name: str, incident_url: str) -> str:
    return (
        "**OneUptime Incident Update**\n\n"
        f"Status changed: **{old_name}** -> **{new_name}**\n\n"
        f"[View incident]({incident_url})"
    )
