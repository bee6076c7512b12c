from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Generic, List, Optional, TypeVar
from uuid import UUID
from datetime import datetime, timezone
from eventhub.db.models.event import EventStatus

T = TypeVar("T")


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every successful response."""
    message: str
    data: T


class SignupRequest(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(BaseModel):
    """Schema for user login request."""
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserOut(CamelModel):
    id: UUID
    name: str
    email: str
    created_at: Optional[datetime] = None


class UserSummary(CamelModel):
    """Shallow view of a user embedded in event payloads."""
    id: UUID
    name: str
    email: str


class AuthResult(BaseModel):
    user: UserOut
    token: str


class ProfileData(BaseModel):
    user: UserOut


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    date: datetime
    location: str = Field(min_length=1, max_length=200)
    capacity: int = Field(ge=1, le=10000, strict=True)

    @field_validator("title", "description", "location")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field is required")
        return value

    @field_validator("date")
    @classmethod
    def date_in_future(cls, value: datetime) -> datetime:
        value = as_utc(value)
        if value <= datetime.now(timezone.utc):
            raise ValueError("Event date must be in the future")
        return value


class EventQuery(BaseModel):
    """Listing filters; bounds on page/limit are enforced by the route."""
    page: int = 1
    limit: int = 10
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    @field_validator("location", "search")
    @classmethod
    def blank_as_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class EventOut(CamelModel):
    id: UUID
    title: str
    description: str
    date: datetime
    location: str
    capacity: int
    status: EventStatus
    organizer: UserSummary
    attendees: List[UserSummary] = []
    available_spots: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventData(BaseModel):
    event: EventOut


class PaginationMetadata(CamelModel):
    current_page: int
    total_pages: int
    total_events: int
    has_next: bool
    has_prev: bool


class EventList(BaseModel):
    events: List[EventOut]
    pagination: PaginationMetadata


class StatsOverview(CamelModel):
    total_events: int = 0
    total_attendees: int = 0
    upcoming_events: int = 0
    past_events: int = 0


class MonthCount(BaseModel):
    year: int
    month: int
    count: int


class EventStats(CamelModel):
    overview: StatsOverview
    events_by_month: List[MonthCount]


class DeleteResult(BaseModel):
    message: str
