from seatadmin.logger_config import logger
from seatadmin.models.event import EventCreate
from seatadmin.models.user import UserCreate, UserRole
from seatadmin.service import SeatingService

DEMO_EVENT = {
    "name": "Grand Opening Concert",
    "date": "2025-06-15",
    "venue": "Main Hall",
    "configuration": {
        "zones": [
            {
                "name": "Front",
                "sections": [
                    {
                        "name": "Left",
                        "rows": [
                            {"label": "A", "seatCount": 5},
                            {"label": "B", "seatCount": 6},
                        ],
                    },
                    {
                        "name": "Center",
                        "rows": [
                            {"label": "A", "seatCount": 10},
                            {"label": "B", "seatCount": 12},
                        ],
                    },
                    {
                        "name": "Right",
                        "rows": [
                            {"label": "A", "seatCount": 5},
                            {"label": "B", "seatCount": 6},
                        ],
                    },
                ],
            },
            {
                "name": "Back",
                "sections": [
                    {
                        "name": "General",
                        "rows": [
                            {"label": "AA", "seatCount": 20, "aisles": [10]},
                            {"label": "BB", "seatCount": 20, "aisles": [10]},
                        ],
                    }
                ],
            },
        ]
    },
}


def seed_demo_data(service: SeatingService) -> None:
    """Create a bootstrap admin and a demo event when the stores are empty"""
    if not service.list_users():
        admin = service.create_user(UserCreate(username="admin", role=UserRole.ADMIN))
        logger.info(f"Seeded admin user with ID {admin.id}")

    if not service.list_events():
        event = service.create_event(EventCreate.model_validate(DEMO_EVENT))
        logger.info(f"Seeded demo event with ID {event.id}")
