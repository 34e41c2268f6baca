"""In-memory registry of conversations linked to OneUptime incidents."""
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Link:
    """A tracked incident and the conversation that raised it."""
    incident_id: str
    conversation_id: int | str
    last_known_state_id: str
    # Snapshot taken at creation; never refreshed.
    state_map: Dict[str, str] = field(default_factory=dict)

    def state_name(self, state_id: str) -> str:
        """Display name for a state ID, or the raw ID if it was not in the snapshot."""
        return self.state_map.get(state_id, state_id)


class LinkTracker:
    """
    Incident ID -> Link table shared by the webhook handler and the poller.

    Every operation holds the lock; `entries()` returns a snapshot so callers
    can iterate while other tasks add or remove links. Contents are lost on
    restart.
    """

    def __init__(self):
        self._links: Dict[str, Link] = {}
        self._lock = threading.Lock()

    def track(
        self,
        conversation_id: int | str,
        incident_id: str,
        initial_state_id: str,
        state_map: Dict[str, str]
    ) -> Link:
        """Start tracking an incident; replaces any existing link for the same incident."""
        link = Link(
            incident_id=incident_id,
            conversation_id=conversation_id,
            last_known_state_id=initial_state_id,
            state_map=dict(state_map)
        )
        with self._lock:
            self._links[incident_id] = link
        logger.info("Tracking incident", incident_id=incident_id, conversation_id=conversation_id)
        return link

    def untrack(self, incident_id: str) -> None:
        with self._lock:
            self._links.pop(incident_id, None)

    def get(self, incident_id: str) -> Optional[Link]:
        with self._lock:
            return self._links.get(incident_id)

    def update_state(self, incident_id: str, state_id: str) -> None:
        """Record the latest observed state; no-op if the incident is no longer tracked."""
        with self._lock:
            link = self._links.get(incident_id)
            if link is not None:
                link.last_known_state_id = state_id

    def entries(self) -> List[Tuple[str, Link]]:
        with self._lock:
            return list(self._links.items())

    def size(self) -> int:
        with self._lock:
            return len(self._links)

    def __len__(self) -> int:
        return self.size()
