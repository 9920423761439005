"""Domain models for live meeting sessions."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class SessionState:
    """A connection's view of the meeting it is attached to."""

    meeting_id: str
    meeting_name: str
    owner_id: UUID
    start_time: datetime
    participant_count: int = 1
