"""
Shared test fixtures - SQLite test database, test client, user-key headers,
sample analyses.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set before importing app modules - config is read at import time
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"

from floorplan_estimator.database import Base, get_db
from floorplan_estimator.main import app
from floorplan_estimator.analysis_service import reset_sessions


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after. Analysis sessions are in-memory."""
    Base.metadata.create_all(bind=engine)
    reset_sessions()
    yield
    reset_sessions()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_headers():
    return {"X-User-Key": "test-user-1"}


@pytest.fixture
def other_user_headers():
    return {"X-User-Key": "test-user-2"}


@pytest.fixture
def default_settings():
    return {"currency": "INR", "wall_height_m": 3.0, "brick_size": "standard"}


@pytest.fixture
def sample_analysis():
    """Small two-bedroom plan as the AI would return it (snake_case after validation)."""
    return {
        "summary": {"total_area_sq_m": 100.0, "total_wall_length_m": 80.0, "wall_thickness_m": 0.15},
        "rooms": [
            {"name": "Master Bedroom", "type": "Bedroom", "area_sq_m": 12.0, "perimeter_m": 14.0},
            {"name": "Kitchen", "type": "Kitchen", "area_sq_m": 10.0, "perimeter_m": 13.0},
            {"name": "Bath", "type": "Bathroom", "area_sq_m": 5.0, "perimeter_m": 9.0},
        ],
        "elements": {"doors": 4, "windows": 8},
    }


@pytest.fixture
def sample_analysis_camel():
    """The same plan in the AI service's camelCase wire format."""
    return {
        "summary": {"totalAreaSqM": 100.0, "totalWallLengthM": 80.0, "wallThicknessM": 0.15},
        "rooms": [
            {"name": "Master Bedroom", "type": "Bedroom", "areaSqM": 12.0, "perimeterM": 14.0},
            {"name": "Kitchen", "type": "Kitchen", "areaSqM": 10.0, "perimeterM": 13.0},
            {"name": "Bath", "type": "Bathroom", "areaSqM": 5.0, "perimeterM": 9.0},
        ],
        "elements": {"doors": 4, "windows": 8},
    }
