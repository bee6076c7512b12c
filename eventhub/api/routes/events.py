from fastapi import APIRouter, Depends, Query, status
from eventhub.schemas import ApiResponse, EventCreate, EventQuery, EventData, EventList, EventStats, DeleteResult
from eventhub.db.session import get_session
from eventhub.db.models.user import User
from eventhub.services.event_service import EventService
from eventhub.auth import get_current_user
from eventhub.core.config import settings
from eventhub.core.errors import InvalidIdError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import datetime
import uuid

# Every event route requires an authenticated user
router = APIRouter(prefix="/events", tags=["events"], dependencies=[Depends(get_current_user)])

def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)

def parse_event_id(event_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(event_id)
    except ValueError:
        raise InvalidIdError()

@router.post("", response_model=ApiResponse[EventData], status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    event = await event_service.create_event(payload, user.id)
    return {"message": "Event created successfully", "data": EventData(event=event)}

@router.get("", response_model=ApiResponse[EventList])
async def list_events(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE, description="Number of events per page"),
    location: Optional[str] = Query(None, description="Case-insensitive substring of the location"),
    start_date: Optional[datetime] = Query(None, alias="startDate", description="Earliest event date (inclusive)"),
    end_date: Optional[datetime] = Query(None, alias="endDate", description="Latest event date (inclusive)"),
    search: Optional[str] = Query(None, description="Text search over title and description"),
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    """
    List published events, soonest first.

    - page / limit: pagination, limit capped at MAX_PAGE_SIZE
    - location: case-insensitive substring match
    - startDate / endDate: inclusive date bounds (ISO 8601)
    - search: text match over title and description
    """
    filters = EventQuery(
        page=page,
        limit=limit,
        location=location,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    result = await event_service.list_events(filters, user.id)
    return {"message": "Events retrieved successfully", "data": result}

@router.get("/stats", response_model=ApiResponse[EventStats])
async def get_event_stats(
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    stats = await event_service.get_event_stats(user.id)
    return {"message": "Event statistics retrieved successfully", "data": stats}

@router.get("/{event_id}", response_model=ApiResponse[EventData])
async def get_event(
    event_id: str,
    event_service: EventService = Depends(get_event_service)
):
    event = await event_service.get_event(parse_event_id(event_id))
    return {"message": "Event retrieved successfully", "data": EventData(event=event)}

@router.delete("/{event_id}", response_model=ApiResponse[DeleteResult])
async def delete_event(
    event_id: str,
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    result = await event_service.delete_event(parse_event_id(event_id), user.id)
    return {"message": "Event deleted successfully", "data": result}
