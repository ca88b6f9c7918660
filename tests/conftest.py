# tests/conftest.py

import pytest

from app import create_app
from app.extensions import db
from config import Config


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    ADMIN_USER = 'admin'
    ADMIN_PASS = 'secret'


@pytest.fixture
def app():
    """A fresh app backed by an in-memory SQLite database."""
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    response = client.post('/login', json={'username': 'admin', 'password': 'secret'})
    assert response.status_code == 200
    return client


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app
