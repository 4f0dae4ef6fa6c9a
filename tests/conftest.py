from datetime import datetime

import fakeredis
import pytest

from app import create_app
from config import Config
from extensions import db
from models import Room


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis()


@pytest.fixture
def app(tmp_path, redis_client):
    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'whiteboard.db'}"
        BLOB_REDIS_CLIENT = redis_client
        LOG_LEVEL = "WARNING"

    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_room(client):
    def _make_room(**body):
        resp = client.post("/api/rooms", json=body)
        assert resp.status_code == 200
        return resp.get_json()["room_id"]
    return _make_room


@pytest.fixture
def backdate_activity(app):
    """Pin a room's last_activity to a fixed past time and return it."""
    stale = datetime(2020, 1, 1, 12, 0, 0)

    def _backdate(room_id):
        with app.app_context():
            db.session.get(Room, room_id).last_activity = stale
            db.session.commit()
        return stale
    return _backdate
