from datetime import datetime, timedelta, timezone

import pytest

from copabet import create_app, db
from copabet.models import ROLE_ADMIN, ROLE_USER, Match, User


def make_user(username, password="secret", role=ROLE_USER, name=None):
    user, message = User.create_user(
        name=name or username.title(), username=username, password=password, role=role
    )
    assert user is not None, message
    db.session.commit()
    return user


def make_match(home_team, away_team, group="Group A", hours_ahead=48):
    match, message = Match.create_match(
        home_team=home_team,
        away_team=away_team,
        group=group,
        match_time=datetime.now(timezone.utc).replace(tzinfo=None)
        + timedelta(hours=hours_ahead),
    )
    assert match is not None, message
    db.session.commit()
    return match


def login(client, username, password="secret"):
    response = client.post(
        "/auth/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.get_json()
    return response


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Application context for tests that work with models directly"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    """Ids of one admin and two players"""
    with app.app_context():
        return {
            "admin": make_user("admin", role=ROLE_ADMIN, name="Administrator").id,
            "alice": make_user("alice").id,
            "bob": make_user("bob").id,
        }


@pytest.fixture
def admin_client(app, users):
    client = app.test_client()
    login(client, "admin")
    return client


@pytest.fixture
def alice_client(app, users):
    client = app.test_client()
    login(client, "alice")
    return client


@pytest.fixture
def bob_client(app, users):
    client = app.test_client()
    login(client, "bob")
    return client
