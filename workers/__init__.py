"""Incident link tracking and status reconciliation."""
from .tracker import Link, LinkTracker
from .poller import IncidentPoller

__all__ = ["Link", "LinkTracker", "IncidentPoller"]
