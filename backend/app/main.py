from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_settings
from core.database import init_db
from core.exceptions import register_exception_handlers
from modules.reservations.routes import router as reservations_router
from modules.reservations.events import register_default_handlers
from app.startup import configure_startup_logging, run_startup_checks

settings = get_settings()

app = FastAPI(
    title="Table Reservations API",
    description="""
    Table booking for a single restaurant.

    ## Features

    * **Availability** - Bookable start times per date and party size
    * **Reservations** - Automatic best-fit table allocation with no double booking
    * **Deposits** - Large parties and holiday bookings are held until payment is confirmed
    * **Staff tools** - Daily sheet, phone bookings and cancellations on behalf of guests
    * **Administration** - Tables, weekly opening hours and holiday overrides

    ## Authentication

    Endpoints require a JWT bearer token. Staff endpoints need one of the
    roles `admin`, `manager`, `host` or `staff`.
    """,
    version="1.0.0",
)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reservations_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup"""
    configure_startup_logging(settings.log_level)
    if settings.is_development:
        init_db()
    run_startup_checks()
    register_default_handlers()


@app.get("/")
def read_root():
    return {"message": "Reservations backend is running"}


@app.get("/health")
def health():
    return {"status": "healthy", "environment": settings.environment}
