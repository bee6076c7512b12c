from sqlalchemy.ext.asyncio import AsyncSession
from eventhub.schemas import EventCreate, EventQuery, EventOut, EventList, PaginationMetadata, EventStats, StatsOverview, MonthCount, DeleteResult
from eventhub.db.repositories import (
    create_event as db_create_event,
    get_event as db_get_event,
    delete_event as db_delete_event,
    list_events as db_list_events,
    count_events as db_count_events,
    organizer_overview as db_organizer_overview,
    organizer_events_by_month as db_organizer_events_by_month,
)
from eventhub.core.config import settings
from eventhub.core.errors import ForbiddenError, NotFoundError
from eventhub.core.logging import logger
from datetime import datetime, timezone
import math


def build_pagination(total: int, page: int, limit: int) -> PaginationMetadata:
    """Pagination metadata for ``total`` matches split into pages of ``limit``."""
    total_pages = math.ceil(total / limit)
    return PaginationMetadata(
        current_page=page,
        total_pages=total_pages,
        total_events=total,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def clamp_page(page: int, limit: int):
    return max(page, 1), min(max(limit, 1), settings.MAX_PAGE_SIZE)


class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_event(self, payload: EventCreate, organizer_id) -> EventOut:
        event = await db_create_event(self.session, payload, organizer_id)
        logger.info(f"Event {event.id} created by {organizer_id}")
        return EventOut.model_validate(event)

    async def get_event(self, event_id) -> EventOut:
        event = await db_get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found")
        return EventOut.model_validate(event)

    async def delete_event(self, event_id, requesting_user_id) -> DeleteResult:
        event = await db_get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found")
        if event.organizer_id != requesting_user_id:
            logger.warning(f"User {requesting_user_id} tried to delete event {event_id} they do not organize")
            raise ForbiddenError("Not authorized to delete this event")

        await db_delete_event(self.session, event)
        logger.info(f"Event {event_id} deleted by {requesting_user_id}")
        return DeleteResult(message="Event deleted successfully")

    async def list_events(self, filters: EventQuery, requesting_user_id=None) -> EventList:
        """
        One page of published events plus pagination metadata.

        ``requesting_user_id`` does not narrow the listing; every
        authenticated user sees the same published events.
        """
        page, limit = clamp_page(filters.page, filters.limit)
        skip = (page - 1) * limit

        total = await db_count_events(self.session, filters)
        events = await db_list_events(self.session, filters, limit=limit, offset=skip)

        return EventList(
            events=[EventOut.model_validate(ev) for ev in events],
            pagination=build_pagination(total, page, limit),
        )

    async def get_event_stats(self, organizer_id) -> EventStats:
        now = datetime.now(timezone.utc)
        overview = await db_organizer_overview(self.session, organizer_id, now)
        by_month = await db_organizer_events_by_month(self.session, organizer_id)
        return EventStats(
            overview=StatsOverview(**overview),
            events_by_month=[MonthCount(year=y, month=m, count=c) for y, m, c in by_month],
        )
