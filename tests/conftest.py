"""
Fellowship Manager - test configuration and fixtures
"""
import os
import uuid
from datetime import date, datetime, timedelta, timezone

import fakeredis
import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before the app reads its settings
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only-0123456789'
os.environ['SCHEDULER_ENABLED'] = 'false'
os.environ['ORG_UTC_OFFSET_HOURS'] = '3'

from main import app
from config.database import Base, get_db
from config.tag_config import SystemTag
from utils.time_utils import FixedClock, get_clock
from utils.cache_utils import cache_manager
from utils.fellowship_number import generate_fellowship_number
from helpers.token_helper import create_member_token
from api.auth.auth_service import hash_password
from api.members.members_model import Member, MemberRole, Gender, RegistrationMode
from api.courses.courses_model import Course
from api.regions.regions_model import Region
from api.events.events_model import Event, EventType
from api.tags.tags_service import TagService

fake = Faker()

EAT = timezone(timedelta(hours=3))
EVENT_DAY = date(2026, 3, 3)          # a Tuesday
TEST_PASSWORD = 'password123'
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)

engine = create_engine(
    'sqlite://',
    connect_args={'check_same_thread': False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def local_time(hour: int, minute: int = 0, day: date = EVENT_DAY) -> datetime:
    """An instant given in organisation local time (UTC+3)."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=EAT)


@pytest.fixture(autouse=True)
def fake_cache():
    previous = cache_manager._client
    cache_manager._client = fakeredis.FakeRedis(decode_responses=True)
    yield cache_manager._client
    cache_manager._client = previous


@pytest.fixture
def db():
    """Fresh schema per test, with the system tags seeded."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    TagService(session).ensure_system_tags()
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    """Pinned to 19:00 local on the event day; tests move it by setting .instant."""
    return FixedClock(local_time(19, 0))


@pytest.fixture
def client(db, clock):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with_client = TestClient(app)
    yield with_client
    app.dependency_overrides.clear()


@pytest.fixture
def region(db):
    region = Region(name=fake.unique.city())
    db.add(region)
    db.commit()
    db.refresh(region)
    return region


@pytest.fixture
def course(db):
    course = Course(name='Bachelor of Science in Computer Science', code='BSCS', duration_years=4)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture
def make_member(db, region):
    def _make(role=MemberRole.member, **overrides):
        fields = dict(
            full_name=fake.name(),
            email=fake.unique.email(),
            phone_number=fake.numerify('07########'),
            gender=Gender.female,
            fellowship_number=generate_fellowship_number(db),
            password=TEST_PASSWORD_HASH,
            qr_code=uuid.uuid4().hex,
            role=role,
            registration_mode=RegistrationMode.readmission,
            registration_date=datetime(2025, 8, 1, tzinfo=timezone.utc),
            region_id=region.id,
        )
        fields.update(overrides)
        member = Member(**fields)
        db.add(member)
        db.commit()
        db.refresh(member)
        return member
    return _make


@pytest.fixture
def manager(make_member):
    return make_member(role=MemberRole.fellowship_manager)


@pytest.fixture
def member(make_member):
    return make_member()


def auth_headers_for(member) -> dict:
    return {'Authorization': f'Bearer {create_member_token(member)}'}


@pytest.fixture
def manager_headers(manager) -> dict:
    return auth_headers_for(manager)


@pytest.fixture
def make_event(db, manager):
    def _make(start='18:00', end='20:00', day=EVENT_DAY, is_active=True, **overrides):
        event = Event(
            name=overrides.pop('name', 'Tuesday Fellowship'),
            date=day,
            start_time=start,
            end_time=end,
            type=overrides.pop('type', EventType.tuesday_fellowship),
            is_active=is_active,
            created_by=manager.id,
            **overrides,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event
    return _make


@pytest.fixture
def event(make_event):
    return make_event()
