"""
Repository layer for database operations.

Provides async functions for CRUD operations on User and Event entities,
the filtered event listing query and the per-organizer aggregates.
"""
from sqlalchemy import select, or_, and_, func, case, distinct, extract, literal_column
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from eventhub.db.models.user import User
from eventhub.db.models.event import Event, EventStatus, event_attendees, text_search_vector, SEARCH_CONFIG
from eventhub.schemas import SignupRequest, EventCreate, EventQuery
from eventhub.core.security import hash_password
from typing import Optional, List, Dict, Tuple
from datetime import datetime
import uuid


async def create_user(db: AsyncSession, user_in: SignupRequest) -> User:
    """
    Create a new user with hashed password.

    Args:
        db: Database session
        user_in: Signup data

    Returns:
        Created User object
    """
    hashed = hash_password(user_in.password)
    user = User(name=user_in.name, email=user_in.email, hashed_password=hashed)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user

async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """
    Retrieve user by email address.

    Args:
        db: Database session
        email: User's email address

    Returns:
        User object if found, None otherwise
    """
    q = select(User).where(User.email == email)
    res = await db.execute(q)
    return res.scalars().first()

async def get_user(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
    q = select(User).where(User.id == user_id)
    res = await db.execute(q)
    return res.scalars().first()

def _with_people(q):
    return q.options(selectinload(Event.organizer), selectinload(Event.attendees))

async def create_event(db: AsyncSession, payload: EventCreate, organizer_id: uuid.UUID) -> Event:
    """
    Create a new event owned by ``organizer_id``.

    Returns:
        The stored Event with organizer and attendees loaded
    """
    ev = Event(**payload.model_dump(), organizer_id=organizer_id, status=EventStatus.published)
    db.add(ev)
    await db.commit()
    return await get_event(db, ev.id)

async def get_event(db: AsyncSession, event_id: uuid.UUID) -> Optional[Event]:
    q = _with_people(select(Event).where(Event.id == event_id)).execution_options(populate_existing=True)
    res = await db.execute(q)
    return res.scalars().first()

async def delete_event(db: AsyncSession, event: Event) -> None:
    await db.delete(event)
    await db.commit()

def _search_clause(dialect_name: str, search: str):
    # Any search word matching the title or description selects the event
    terms = search.split()
    if dialect_name == "postgresql":
        vector = text_search_vector()
        return or_(*(vector.op('@@')(func.plainto_tsquery(SEARCH_CONFIG, term)) for term in terms))
    return or_(*(
        or_(Event.title.icontains(term, autoescape=True), Event.description.icontains(term, autoescape=True))
        for term in terms
    ))

def event_filters(filters: EventQuery, dialect_name: str) -> list:
    """
    Build the WHERE clauses for the published-event listing.

    Location is a case-insensitive substring match, the date bounds are
    inclusive and search matches title and description.
    """
    clauses = [Event.status == EventStatus.published]
    if filters.location:
        clauses.append(Event.location.icontains(filters.location, autoescape=True))
    if filters.start_date:
        clauses.append(Event.date >= filters.start_date)
    if filters.end_date:
        clauses.append(Event.date <= filters.end_date)
    if filters.search:
        clauses.append(_search_clause(dialect_name, filters.search))
    return clauses

async def list_events(db: AsyncSession, filters: EventQuery, limit: int, offset: int) -> List[Event]:
    """List published events matching ``filters``, soonest first."""
    clauses = event_filters(filters, db.get_bind().dialect.name)
    q = _with_people(select(Event).where(and_(*clauses)))
    q = q.order_by(Event.date.asc(), Event.id.asc()).limit(limit).offset(offset)
    res = await db.execute(q)
    return list(res.scalars().all())

async def count_events(db: AsyncSession, filters: EventQuery) -> int:
    """Count every event matching ``filters``, not only the current page."""
    clauses = event_filters(filters, db.get_bind().dialect.name)
    q = select(func.count(Event.id)).where(and_(*clauses))
    res = await db.execute(q)
    return res.scalar() or 0

async def organizer_overview(db: AsyncSession, organizer_id: uuid.UUID, now: datetime) -> Dict[str, int]:
    """
    Aggregate totals for one organizer in a single query.

    Events are outer-joined to their attendee rows, so event counts use
    DISTINCT ids while attendee rows are counted directly.
    """
    q = (
        select(
            func.count(distinct(Event.id)).label("total_events"),
            func.count(event_attendees.c.user_id).label("total_attendees"),
            func.count(distinct(case((Event.date > now, Event.id)))).label("upcoming_events"),
            func.count(distinct(case((Event.date <= now, Event.id)))).label("past_events"),
        )
        .select_from(Event)
        .outerjoin(event_attendees, event_attendees.c.event_id == Event.id)
        .where(Event.organizer_id == organizer_id)
    )
    row = (await db.execute(q)).one()
    return {key: int(value or 0) for key, value in row._mapping.items()}

def events_by_month_query(organizer_id: uuid.UUID, dialect_name: str):
    """Group one organizer's events by UTC calendar month."""
    event_date = Event.date
    if dialect_name == "postgresql":
        # timestamptz fields are otherwise extracted in the session time zone
        event_date = func.timezone(literal_column("'UTC'"), Event.date)
    year = extract("year", event_date)
    month = extract("month", event_date)
    return (
        select(year.label("year"), month.label("month"), func.count(Event.id).label("count"))
        .where(Event.organizer_id == organizer_id)
        .group_by(year, month)
        .order_by(year, month)
    )

async def organizer_events_by_month(db: AsyncSession, organizer_id: uuid.UUID) -> List[Tuple[int, int, int]]:
    """Return ``(year, month, count)`` for each month with at least one event, ascending."""
    q = events_by_month_query(organizer_id, db.get_bind().dialect.name)
    res = await db.execute(q)
    return [(int(y), int(m), int(c)) for y, m, c in res.all()]
