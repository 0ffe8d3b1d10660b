import pytest

from config import TestingConfig
from copabet import create_app, db
from copabet.models import ROLE_ADMIN, Bet
from copabet.routes.api.routes import leaderboard_entries
from copabet.utils.cache_utils import STALE_CACHES_KEY
from tests.conftest import login, make_match, make_user


@pytest.fixture
def cached_app(monkeypatch):
    monkeypatch.setattr(TestingConfig, "CACHE_TYPE", "SimpleCache")
    app = create_app("testing")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def cached_ctx(cached_app):
    with cached_app.app_context():
        yield


def points_of(username):
    return {
        entry["user"]["username"]: entry["points"] for entry in leaderboard_entries()
    }[username]


def test_leaderboard_is_served_from_cache(cached_ctx):
    alice = make_user("alice")
    assert points_of("alice") == 0

    # Writes that skip the standings recalculation leave the cache alone
    alice.points = 42
    db.session.commit()
    assert points_of("alice") == 0


def test_recalculation_clears_cache_when_committed(cached_ctx):
    alice = make_user("alice")
    match = make_match("Brazil", "Argentina")
    Bet.place_bet(alice.id, match.id, 2, 1)
    db.session.commit()
    assert points_of("alice") == 0

    match.set_result(2, 1)
    assert db.session.info[STALE_CACHES_KEY] == {"leaderboard"}
    # Not yet committed, readers keep the last committed standings
    assert points_of("alice") == 0

    db.session.commit()
    assert STALE_CACHES_KEY not in db.session.info
    assert points_of("alice") == 10


def test_rollback_discards_pending_invalidation(cached_ctx):
    alice = make_user("alice")
    match = make_match("Brazil", "Argentina")
    Bet.place_bet(alice.id, match.id, 2, 1)
    db.session.commit()
    assert points_of("alice") == 0

    match.set_result(2, 1)
    db.session.rollback()

    assert STALE_CACHES_KEY not in db.session.info
    assert points_of("alice") == 0


def test_api_leaderboard_follows_results_and_new_players(cached_app):
    with cached_app.app_context():
        make_user("admin", role=ROLE_ADMIN)
        make_user("alice")
        match_id = make_match("Brazil", "Argentina").id

    admin = cached_app.test_client()
    alice = cached_app.test_client()
    login(admin, "admin")
    login(alice, "alice")

    def board():
        return {
            entry["user"]["username"]: entry["points"]
            for entry in admin.get("/api/leaderboard").get_json()["leaderboard"]
        }

    alice.post(
        "/api/bets", json={"match_id": match_id, "home_score": 3, "away_score": 0}
    )
    assert board() == {"alice": 0}

    response = admin.post(
        f"/api/matches/{match_id}/result", json={"home_score": 3, "away_score": 0}
    )
    assert response.status_code == 200
    assert board() == {"alice": 10}

    response = admin.post(
        "/api/users", json={"name": "Bob", "username": "bob", "password": "pass1234"}
    )
    assert response.status_code == 201
    assert board() == {"alice": 10, "bob": 0}
