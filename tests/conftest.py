"""Pytest configuration and fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from media_taxonomy_filter.database.schema import Base, reference_table
from media_taxonomy_filter.ingestion import load_fixture

FIELD = "field_media_category"

# Food
# ├── Fruit
# │   ├── Apple
# │   │   └── Granny Smith
# │   └── Tomato (also under Vegetable)
# └── Vegetable
#     └── Tomato
FOOD, FRUIT, APPLE, GRANNY, VEGETABLE, TOMATO = 1, 2, 3, 4, 5, 6

FOOD_FIXTURE = {
    "vocabulary": "media_category",
    "reference_field": FIELD,
    "terms": [
        {"tid": FOOD, "name": "Food"},
        {"tid": FRUIT, "name": "Fruit", "parents": [FOOD]},
        {"tid": APPLE, "name": "Apple", "parents": [FRUIT]},
        {"tid": GRANNY, "name": "Granny Smith", "parents": [APPLE]},
        {"tid": VEGETABLE, "name": "Vegetable", "parents": [FOOD]},
        {"tid": TOMATO, "name": "Tomato", "parents": [FRUIT, VEGETABLE]},
    ],
    "media": [
        {"mid": 10, "name": "orchard.jpg", "terms": [APPLE]},
        {"mid": 11, "name": "market.jpg", "terms": [FRUIT]},
        {"mid": 12, "name": "salad.jpg", "terms": [TOMATO]},
        {"mid": 13, "name": "pantry.jpg", "terms": [FOOD]},
        {"mid": 14, "name": "green-apple.jpg", "terms": [GRANNY]},
        {"mid": 15, "name": "untagged.jpg", "terms": []},
    ],
}


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    reference_table(FIELD)
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def food_session(session):
    """Session seeded with the food hierarchy and tagged media."""
    load_fixture(FOOD_FIXTURE, session)
    return session
