"""Shared fixtures for engine and API tests."""
from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from attendance_engine import create_app, db
from attendance_engine.models import (
    BiometricProfile, ClassSession, Course, Enrollment, Location,
    ProfileStatus, User, UserRole
)
from attendance_engine.services.container import build_engine
from attendance_engine.services.ephemeral_store import InMemoryStore
from attendance_engine.services.face_verifier import StaticFaceVerifier
from attendance_engine.services.geofence_verifier import HaversineGeofenceVerifier

SESSION_START = datetime(2026, 3, 2, 10, 0)
SESSION_END = datetime(2026, 3, 2, 11, 0)
ROOM_SSID = 'Room101'
ROOM_CENTRE = (33.3152, 44.3661)


class FrozenClock:
    """Clock the tests move by hand."""

    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def set(self, when: datetime) -> None:
        self.current = when

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def clock():
    return FrozenClock(SESSION_START + timedelta(minutes=5))


@pytest.fixture
def cache():
    return InMemoryStore()


@pytest.fixture
def face_verifier():
    return StaticFaceVerifier()


@pytest.fixture
def geofence_verifier():
    return HaversineGeofenceVerifier()


@pytest.fixture
def engine(app, clock, cache, face_verifier, geofence_verifier):
    """Engine rebuilt with a frozen clock and deterministic verifiers."""
    engine = build_engine(
        app,
        clock=clock,
        cache=cache,
        face_verifier=face_verifier,
        geofence_verifier=geofence_verifier
    )
    yield engine
    engine.checkin.runner.shutdown()


@pytest.fixture
def client(app, engine):
    """Create test client."""
    return app.test_client()


def make_user(email, role=UserRole.PARTICIPANT, name=None):
    user = User(email=email, name=name or email.split('@')[0], role=role)
    return user.save()


@pytest.fixture
def owner(app):
    return make_user('owner@example.com', UserRole.OWNER)


@pytest.fixture
def other_owner(app):
    return make_user('other.owner@example.com', UserRole.OWNER)


@pytest.fixture
def admin(app):
    return make_user('admin@example.com', UserRole.ADMIN)


@pytest.fixture
def participant(app):
    return make_user('participant@example.com')


@pytest.fixture
def outsider(app):
    """Participant with no enrollment."""
    return make_user('outsider@example.com')


@pytest.fixture
def course(app, owner):
    return Course(code='CS101', name='Intro to Computing', owner_id=owner.id).save()


@pytest.fixture
def location(app):
    return Location(
        name='Room 101',
        wifi_ssid=ROOM_SSID,
        latitude=ROOM_CENTRE[0],
        longitude=ROOM_CENTRE[1],
        radius_meters=100
    ).save()


@pytest.fixture
def class_session(app, course, owner, location):
    return ClassSession(
        title='Lecture 1',
        course_id=course.id,
        owner_id=owner.id,
        location_id=location.id,
        start_time=SESSION_START,
        end_time=SESSION_END,
        is_active=True
    ).save()


@pytest.fixture
def enrollment(app, participant, course):
    return Enrollment(participant_id=participant.id, course_id=course.id).save()


@pytest.fixture
def profile(app, participant):
    return BiometricProfile(
        participant_id=participant.id,
        descriptors=[[0.1, 0.2, 0.3, 0.4]],
        status=ProfileStatus.APPROVED,
        quality_score=0.9
    ).save()


def auth_headers(user):
    """Bearer header for ``user``; needs an app context."""
    token = create_access_token(identity=str(user.id))
    return {'Authorization': f'Bearer {token}'}
