"""Resolve free-text severity and team names against OneUptime reference lists.

Lists are consumed in the order OneUptime returned them; ties go to the first
element that satisfies a rule.
"""
from typing import Optional, Sequence, TypeVar
from integrations.models import IncidentState, OnCallPolicy, ReferenceItem, Severity

T = TypeVar("T", bound=ReferenceItem)


def _exact(items: Sequence[T], wanted: str) -> Optional[T]:
    return next((item for item in items if item.name.lower() == wanted), None)


def match_severity(severities: Sequence[Severity], requested: str) -> Optional[Severity]:
    """Exact name, else first name starting with the requested text."""
    wanted = requested.lower()
    return _exact(severities, wanted) or next(
        (item for item in severities if item.name.lower().startswith(wanted)),
        None
    )


def match_policy(policies: Sequence[OnCallPolicy], requested: str) -> Optional[OnCallPolicy]:
    """Exact name, else first name containing the requested text."""
    wanted = requested.lower()
    return _exact(policies, wanted) or next(
        (item for item in policies if wanted in item.name.lower()),
        None
    )


def find_created_state(states: Sequence[IncidentState]) -> Optional[IncidentState]:
    """The single state flagged as the created state; None if zero or several are flagged."""
    flagged = [state for state in states if state.is_created_state]
    if len(flagged) != 1:
        return None
    return flagged[0]


def is_resolved_name(name: Optional[str]) -> bool:
    # TODO: switch to IncidentState.is_resolved_state once existing deployments are checked for custom state names
    return bool(name) and "resolved" in name.lower()
