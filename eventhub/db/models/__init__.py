"""Database models package."""
from eventhub.db.models.user import User
from eventhub.db.models.event import Event, EventStatus, event_attendees

__all__ = ["User", "Event", "EventStatus", "event_attendees"]
