from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Table, Uuid, func, Enum, Index, literal_column
import uuid
from sqlalchemy.orm import relationship
from eventhub.db.session import Base
import enum

class EventStatus(str, enum.Enum):
    draft = "draft"
    published = "published"
    cancelled = "cancelled"

SEARCH_CONFIG = literal_column("'english'")

event_attendees = Table(
    "event_attendees",
    Base.metadata,
    Column("event_id", Uuid, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Index("idx_attendee_user", "user_id"),
)

class Event(Base):
    __tablename__ = "events"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(200), nullable=False)
    capacity = Column(Integer, nullable=False)
    organizer_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    status = Column(Enum(EventStatus), default=EventStatus.published, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organizer = relationship("User")
    attendees = relationship("User", secondary=event_attendees)

    __table_args__ = (
        Index('idx_event_date', 'date'),
        Index('idx_event_location', 'location'),
        Index('idx_event_organizer', 'organizer_id'),
        Index('idx_event_status', 'status'),
        Index(
            'idx_event_text_search',
            func.to_tsvector(SEARCH_CONFIG, title + ' ' + description),
            postgresql_using='gin',
        ).ddl_if(dialect='postgresql'),
    )

    @property
    def available_spots(self) -> int:
        return self.capacity - len(self.attendees)


def text_search_vector():
    """The expression indexed by ``idx_event_text_search``."""
    return func.to_tsvector(SEARCH_CONFIG, Event.title + ' ' + Event.description)
