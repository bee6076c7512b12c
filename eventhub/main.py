from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from eventhub.api.routes import auth as auth_router, events as events_router, health as health_router
from eventhub.db.session import engine, Base
from eventhub.core.config import settings
from eventhub.core.errors import register_error_handlers
from eventhub.core.logging import logger
from eventhub.middleware.request_logging import RequestLoggingMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

app = FastAPI(title="EventHub")

# Rate limiter lives on the auth router; slowapi looks it up on app state
app.state.limiter = auth_router.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router.router)
api_router.include_router(events_router.router)
api_router.include_router(health_router.router)

app.include_router(api_router)

@app.on_event("startup")
async def on_startup():
    # create tables (no migrations are shipped)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"EventHub started ({settings.ENVIRONMENT})")

@app.on_event("shutdown")
async def on_shutdown():
    await engine.dispose()
    logger.info("Database connections closed")
