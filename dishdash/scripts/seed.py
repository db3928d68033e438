import logging
import os
from datetime import datetime, timedelta, timezone

from sqlmodel import Session, select

from dishdash.database import create_db_and_tables, engine
from dishdash.models.enums import PriceBand, TodoStatus, UserRole
from dishdash.models.friend import Friend
from dishdash.models.invite import Invite
from dishdash.models.restaurant import Restaurant
from dishdash.models.todo_eat_list import TodoEatListItem
from dishdash.models.user import User
from dishdash.models.visit import Visit, VisitCompanion
from dishdash.utils.dates import now_utc

logger = logging.getLogger(__name__)

SAMPLE_RESTAURANTS = [
    {"name": "Mario's Italian Kitchen", "location": "San Francisco, CA", "cuisine_tags": ["Italian", "Pasta"], "notes": "Amazing carbonara!"},
    {"name": "Sushi Zen", "location": "San Francisco, CA", "cuisine_tags": ["Japanese", "Sushi"]},
    {"name": "Taqueria El Primo", "location": "Oakland, CA", "cuisine_tags": ["Mexican", "Tacos"], "notes": "Best al pastor in the Bay"},
    {"name": "Thai Basil", "location": "Berkeley, CA", "cuisine_tags": ["Thai", "Curry"]},
    {"name": "The Burger Spot", "location": "San Francisco, CA", "cuisine_tags": ["American", "Burgers"]},
]

SAMPLE_FRIENDS = [
    {"name": "Sarah Chen", "email": "sarah.chen@example.com"},
    {"name": "Mike Rodriguez"},
    {"name": "Emma Wilson", "email": "emma.wilson@example.com"},
]


def seed_full(session: Session, admin: User):
    restaurants = [Restaurant(**data, created_by=admin.id) for data in SAMPLE_RESTAURANTS]
    friends = [Friend(**data, created_by=admin.id) for data in SAMPLE_FRIENDS]
    session.add_all(restaurants + friends)
    logger.info("Created %d restaurants and %d friends", len(restaurants), len(friends))

    carbonara = Visit(
        restaurant_id=restaurants[0].id,
        user_id=admin.id,
        visited_at=datetime(2025, 11, 20, tzinfo=timezone.utc),
        rating=5,
        price_band=PriceBand.two,
        notes="Best carbonara ever!",
    )
    sushi = Visit(
        restaurant_id=restaurants[1].id,
        user_id=admin.id,
        visited_at=datetime(2025, 11, 15, tzinfo=timezone.utc),
        rating=4,
        price_band=PriceBand.three,
        notes="Fresh fish, great service",
    )
    session.add_all([carbonara, sushi])
    session.add_all([
        VisitCompanion(visit_id=carbonara.id, friend_id=friends[0].id),
        VisitCompanion(visit_id=sushi.id, friend_id=friends[1].id),
        VisitCompanion(visit_id=sushi.id, friend_id=friends[2].id),
    ])

    session.add_all([
        TodoEatListItem(user_id=admin.id, restaurant_id=restaurants[2].id),
        TodoEatListItem(user_id=admin.id, restaurant_id=restaurants[3].id),
        TodoEatListItem(
            user_id=admin.id,
            restaurant_id=restaurants[4].id,
            status=TodoStatus.eaten,
            completed_at=now_utc(),
        ),
    ])
    session.add(Invite(code="TEST1234", created_by=admin.id, expires_at=now_utc() + timedelta(days=7)))
    logger.info("Created visits, to-eat entries and invite code TEST1234")


def seed(mode: str = "minimal"):
    admin_email = os.getenv("ADMIN_EMAIL", "admin@dishdash.com").strip().lower()
    admin_name = os.getenv("ADMIN_NAME", "Admin User")

    logger.info("Seeding database in %s mode", mode)
    create_db_and_tables()

    with Session(engine) as session:
        existing = session.exec(select(User).where(User.email == admin_email)).first()
        if existing:
            logger.info("Admin user already exists, skipping seed")
            return

        admin = User(email=admin_email, name=admin_name, role=UserRole.admin)
        session.add(admin)
        session.flush()
        logger.info("Created admin user %s", admin.email)

        if mode == "full":
            seed_full(session, admin)

        session.commit()
    logger.info("Seed complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    seed(os.getenv("SEED_MODE", "minimal"))
