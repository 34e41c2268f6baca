"""Test severity / policy resolution rules."""
from escalation.matching import find_created_state, is_resolved_name, match_policy, match_severity
from integrations.models import IncidentState, OnCallPolicy, Severity


SEVERITIES = [
    Severity(id="1", name="Critical"),
    Severity(id="2", name="Major"),
    Severity(id="3", name="Minor"),
]


def test_severity_exact_match_is_case_insensitive():
    assert match_severity(SEVERITIES, "MAJOR").id == "2"


def test_severity_prefix_match():
    assert match_severity(SEVERITIES, "crit").name == "Critical"


def test_severity_prefix_tie_goes_to_first_listed():
    assert match_severity(SEVERITIES, "m").name == "Major"


def test_severity_exact_beats_earlier_prefix():
    severities = [Severity(id="a", name="High Impact"), Severity(id="b", name="High")]

    assert match_severity(severities, "high").id == "b"


def test_severity_no_match():
    assert match_severity(SEVERITIES, "sev1") is None
    assert match_severity([], "critical") is None


def test_severity_does_not_match_substring():
    assert match_severity(SEVERITIES, "tical") is None


def test_policy_substring_match():
    policies = [OnCallPolicy(id="p1", name="Backend On-Call")]

    assert match_policy(policies, "backend").id == "p1"
    assert match_policy(policies, "on-call").id == "p1"


def test_policy_exact_beats_earlier_substring():
    policies = [
        OnCallPolicy(id="p1", name="Backend Escalation"),
        OnCallPolicy(id="p2", name="Backend"),
    ]

    assert match_policy(policies, "backend").id == "p2"
    assert match_policy(policies, "escal").id == "p1"
    assert match_policy(policies, "frontend") is None


def test_find_created_state_requires_exactly_one():
    open_state = IncidentState(id="s1", name="Open", is_created_state=True)
    ack = IncidentState(id="s2", name="Acknowledged")
    other_created = IncidentState(id="s3", name="New", is_created_state=True)

    assert find_created_state([open_state, ack]) is open_state
    assert find_created_state([ack]) is None
    assert find_created_state([open_state, ack, other_created]) is None


def test_is_resolved_name():
    assert is_resolved_name("Resolved")
    assert is_resolved_name("Auto-RESOLVED by monitor")
    assert not is_resolved_name("Acknowledged")
    assert not is_resolved_name(None)
    assert not is_resolved_name("")
