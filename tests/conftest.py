"""Pytest fixtures: a fresh in-memory SQLite application per test."""
from datetime import datetime, timezone

import pytest
import requests

from weekly_picks import create_app, db
from weekly_picks.models import Game, Group, GroupCode, Pick, User
from weekly_picks.services.schedule_provider import ScheduleProvider

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}

# Far enough ahead that every week's deadline is still open
OPEN_SEASON_START = "2099-09-07"
CLOSED_SEASON_START = "2020-09-07"


class FailingSession:
    """requests.Session stand-in whose every call raises"""

    def __init__(self):
        self.headers = {}
        self.calls = 0

    def get(self, url, timeout=None):
        self.calls += 1
        raise requests.exceptions.ConnectionError("feed is down")


@pytest.fixture
def provider():
    return ScheduleProvider(
        season_start="2025-09-08", timezone_name="America/Chicago", sleep=lambda s: None
    )


@pytest.fixture
def app(provider):
    app = create_app("testing", schedule_provider=provider)
    app.config["SEASON_START_DATE"] = OPEN_SEASON_START
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Push an application context for tests that work with models directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


# ---------------------------------------------------------------------------
# Model-level helpers (require an application context)
# ---------------------------------------------------------------------------
def make_group(name="Office Pool", max_members=None, code="OFFICE2025", **code_kwargs):
    group = Group(name=name, max_members=max_members)
    db.session.add(group)
    db.session.flush()
    group_code = GroupCode(code=code, group_id=group.id, **code_kwargs)
    db.session.add(group_code)
    db.session.commit()
    return group, group_code


def make_user(group, username="alice", email=None, is_admin=False):
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        group_id=group.id,
        is_admin=is_admin,
    )
    user.set_password("password123")
    db.session.add(user)
    db.session.commit()
    return user


def make_game(
    week=1,
    home="Buffalo Bills",
    away="Miami Dolphins",
    game_time=None,
    home_score=None,
    away_score=None,
    is_completed=False,
    external_id=None,
):
    game = Game(
        week=week,
        home_team=home,
        away_team=away,
        game_time=game_time or datetime(2025, 9, 11, 0, 20),
        home_score=home_score,
        away_score=away_score,
        is_completed=is_completed,
        external_id=external_id,
    )
    db.session.add(game)
    db.session.commit()
    return game


def make_pick(user, game, side, is_correct=None):
    pick = Pick(
        user_id=user.id,
        game_id=game.id,
        week=game.week,
        selected_side=side,
        selected_team=game.team_for_side(side),
        is_correct=is_correct,
    )
    db.session.add(pick)
    db.session.commit()
    return pick


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# API helpers
# ---------------------------------------------------------------------------
def setup_group(client, group_name="Office Pool", code="OFFICE2025", **extra):
    """Helper: POST /api/admin/quick-setup and return response JSON."""
    payload = {"groupName": group_name, "code": code}
    payload.update(extra)
    resp = client.post("/api/admin/quick-setup", json=payload, headers=ADMIN_HEADERS)
    assert resp.status_code == 201, resp.get_data(as_text=True)
    return resp.get_json()


def register(client, username="alice", code="OFFICE2025", email=None):
    """Helper: POST /api/auth/register, returns the raw response."""
    return client.post(
        "/api/auth/register",
        json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": "password123",
            "groupCode": code,
        },
    )


def register_user(client, username="alice", code="OFFICE2025"):
    """Register and return (auth headers, user JSON)."""
    resp = register(client, username=username, code=code)
    assert resp.status_code == 201, resp.get_data(as_text=True)
    data = resp.get_json()
    return {"Authorization": f"Bearer {data['token']}"}, data["user"]

