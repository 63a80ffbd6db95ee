"""Tests for the schedule provider and syncing fixtures into the game store."""
from datetime import timedelta

import pytest
import requests

from weekly_picks.models import Game
from weekly_picks.services.schedule_provider import (
    GAMES_PER_WEEK,
    TEAMS,
    GameFixture,
    ScheduleProvider,
)
from weekly_picks.utils.data_sync import DataSync
from tests.conftest import FailingSession, utc


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class ScriptedSession:
    """Returns queued responses in order"""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        return self.responses.pop(0)


FEED_WEEK = [
    {
        "GameKey": "202510101",
        "DateTime": "2025-09-11T20:20:00",
        "HomeTeam": "PHI",
        "AwayTeam": "DAL",
        "HomeScore": 24,
        "AwayScore": 20,
        "IsFinal": True,
    },
    {
        "GameKey": "202510102",
        "DateTime": "2025-09-14T13:00:00",
        "HomeTeam": "NYJ",
        "AwayTeam": "PIT",
        "HomeScore": None,
        "AwayScore": None,
        "IsFinal": False,
    },
]


def feed_provider(session):
    return ScheduleProvider(
        api_key="secret",
        season_start="2025-09-08",
        session=session,
        sleep=lambda s: None,
    )


class TestSyntheticSchedule:
    def test_sixteen_games_with_every_team_once(self, provider):
        fixtures = provider.get_synthetic_schedule(2025, 1)
        assert len(fixtures) == GAMES_PER_WEEK

        teams = [f.home_team for f in fixtures] + [f.away_team for f in fixtures]
        assert sorted(teams) == sorted(TEAMS)

    def test_deterministic_ids_and_teams(self, provider):
        first = provider.get_synthetic_schedule(2025, 3)[0]
        assert first.external_id == "2025-W3-1"
        assert first.home_team == "Buffalo Bills"
        assert first.away_team == "Miami Dolphins"
        assert provider.get_synthetic_schedule(2025, 3) == provider.get_synthetic_schedule(2025, 3)

    def test_kickoff_slots(self, provider):
        fixtures = provider.get_synthetic_schedule(2025, 1)

        # Thursday night 20:00 CDT
        assert fixtures[0].game_time == utc(2025, 9, 12, 1, 0)
        # Sunday early and late windows
        assert fixtures[1].game_time == utc(2025, 9, 14, 21, 0)
        assert fixtures[2].game_time == utc(2025, 9, 14, 18, 0)
        # Monday night
        assert fixtures[15].game_time == utc(2025, 9, 16, 1, 0)

    def test_weeks_are_seven_days_apart(self, provider):
        week1 = provider.get_synthetic_schedule(2025, 1)[0].game_time
        week2 = provider.get_synthetic_schedule(2025, 2)[0].game_time
        assert week2 - week1 == timedelta(days=7)

    def test_nothing_is_completed(self, provider):
        assert provider.update_game_scores(2025, 1) == []


class TestFeed:
    def test_parses_feed_week(self):
        session = ScriptedSession(FakeResponse(payload=FEED_WEEK))
        fixtures = feed_provider(session).get_weekly_schedule(2025, 1)

        assert session.urls == [
            "https://api.sportsdata.io/v3/nfl/scores/json/ScoresByWeek/2025/1"
        ]
        assert session.headers["Ocp-Apim-Subscription-Key"] == "secret"
        assert [f.external_id for f in fixtures] == ["202510101", "202510102"]
        # Eastern wall clock converted to an aware instant
        assert fixtures[0].game_time == utc(2025, 9, 12, 0, 20)
        assert fixtures[0].is_completed is True

    def test_update_game_scores_only_completed(self):
        session = ScriptedSession(FakeResponse(payload=FEED_WEEK))
        fixtures = feed_provider(session).update_game_scores(2025, 1)
        assert [(f.home_score, f.away_score) for f in fixtures] == [(24, 20)]

    def test_retries_rate_limited_requests(self):
        session = ScriptedSession(
            FakeResponse(status_code=429, headers={"Retry-After": "0"}),
            FakeResponse(payload=FEED_WEEK),
        )
        fixtures = feed_provider(session).get_weekly_schedule(2025, 1)
        assert len(fixtures) == 2
        assert len(session.urls) == 2

    def test_game_without_kickoff_is_skipped(self):
        unscheduled = dict(FEED_WEEK[1], DateTime=None)
        session = ScriptedSession(FakeResponse(payload=[FEED_WEEK[0], unscheduled]))
        fixtures = feed_provider(session).get_weekly_schedule(2025, 1)

        assert [f.external_id for f in fixtures] == ["202510101"]

    def test_falls_back_to_synthetic_when_feed_is_down(self):
        session = FailingSession()
        fixtures = feed_provider(session).get_weekly_schedule(2025, 1)

        assert session.calls == 3
        assert len(fixtures) == GAMES_PER_WEEK
        assert fixtures[0].external_id == "2025-W1-1"

    def test_falls_back_on_unusable_payload(self):
        session = ScriptedSession(FakeResponse(payload=[{"unexpected": True}]))
        fixtures = feed_provider(session).get_weekly_schedule(2025, 1)
        assert len(fixtures) == GAMES_PER_WEEK

    def test_no_api_key_never_calls_feed(self):
        session = FailingSession()
        keyless = ScheduleProvider(season_start="2025-09-08", session=session)
        assert len(keyless.get_weekly_schedule(2025, 1)) == GAMES_PER_WEEK
        assert session.calls == 0


class TestSeasonCalendar:
    @pytest.mark.parametrize(
        "now, season",
        [
            (utc(2025, 9, 1), 2025),
            (utc(2025, 12, 31), 2025),
            (utc(2026, 1, 15), 2025),
            (utc(2026, 8, 31), 2025),
        ],
    )
    def test_current_season(self, provider, now, season):
        assert provider.get_current_season(now) == season

    @pytest.mark.parametrize(
        "now, week",
        [
            (utc(2025, 8, 1), 1),
            (utc(2025, 9, 8, 5, 0), 1),
            (utc(2025, 9, 15, 4, 59), 1),
            (utc(2025, 9, 15, 5, 0), 2),
            (utc(2025, 11, 20), 11),
            (utc(2026, 3, 1), 18),
        ],
    )
    def test_current_week(self, provider, now, week):
        assert provider.get_current_week(now) == week


class TestDataSync:
    def test_sync_week_is_idempotent(self, ctx, provider):
        sync = DataSync(provider)

        games = sync.sync_week(2025, 1)
        assert len(games) == GAMES_PER_WEEK

        games_again = sync.sync_week(2025, 1)
        assert [g.id for g in games_again] == [g.id for g in games]
        assert Game.query.count() == GAMES_PER_WEEK

    def test_sync_season(self, ctx, provider):
        sync = DataSync(provider)
        sync.sync_week(2025, 1)

        inserted = sync.sync_season(2025)
        assert inserted == GAMES_PER_WEEK * 17
        assert Game.query.count() == GAMES_PER_WEEK * 18
        assert sync.sync_season(2025) == 0

    def test_apply_score_updates(self, ctx, provider):
        sync = DataSync(provider)
        games = sync.sync_week(2025, 1)
        target = games[0]

        fixture = GameFixture(
            external_id=target.external_id,
            week=1,
            home_team=target.home_team,
            away_team=target.away_team,
            game_time=utc(2025, 9, 12, 1, 0),
            home_score=24,
            away_score=17,
            is_completed=True,
        )
        assert sync.apply_score_updates([fixture]) == 1
        assert sync.apply_score_updates([fixture]) == 0

        stored = Game.query.filter_by(external_id=target.external_id).one()
        assert stored.winner == target.home_team

    def test_unknown_fixtures_are_ignored(self, ctx, provider):
        fixture = GameFixture(
            external_id="missing",
            week=1,
            home_team="A",
            away_team="B",
            game_time=utc(2025, 9, 12),
            is_completed=True,
            home_score=1,
            away_score=0,
        )
        assert DataSync(provider).apply_score_updates([fixture]) == 0
