from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seatadmin.config import Settings, settings as default_settings
from seatadmin.database import DynamoDBClient
from seatadmin.locks import EventLockRegistry
from seatadmin.logger_config import logger
from seatadmin.routers import event, event_seat, seat_booking, user
from seatadmin.seed import seed_demo_data
from seatadmin.service import SeatingService
from seatadmin.store.dynamodb import DynamoDBEventStore, DynamoDBSeatStore, DynamoDBUserStore
from seatadmin.store.memory import InMemoryEventStore, InMemorySeatStore, InMemoryUserStore


def build_service(settings: Settings, db_client: Optional[DynamoDBClient] = None) -> SeatingService:
    """Wire the stores selected by the settings into a service"""
    locks = EventLockRegistry(timeout=settings.lock_timeout)

    if settings.store_backend == "dynamodb":
        client = db_client or DynamoDBClient(settings)
        stores = (
            DynamoDBEventStore(client),
            DynamoDBSeatStore(client, locks),
            DynamoDBUserStore(client),
        )
    elif settings.store_backend == "memory":
        stores = (InMemoryEventStore(), InMemorySeatStore(locks), InMemoryUserStore())
    else:
        raise ValueError(f"Unknown store backend '{settings.store_backend}'")

    logger.info(f"Using {settings.store_backend} store")
    return SeatingService(*stores, strict_transitions=settings.strict_transitions)


def create_app(settings: Optional[Settings] = None,
               service: Optional[SeatingService] = None) -> FastAPI:
    settings = settings or default_settings
    service = service or build_service(settings)

    # Create FastAPI app
    app = FastAPI(
        title="Seat Admin - Event Seating & Booking",
        description="Event seating layouts, seat status and booking approval",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.service = service

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(event.router)
    app.include_router(event_seat.router)
    app.include_router(seat_booking.router)
    app.include_router(user.router)

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "seatadmin",
            "store": settings.store_backend,
            "version": "1.0.0",
        }

    if settings.seed_demo:
        seed_demo_data(service)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seatadmin.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )
