"""Tests for leaderboards and user statistics."""
from datetime import datetime

from weekly_picks.models import PickSide
from weekly_picks.utils.leaderboard import (
    accuracy,
    season_leaderboard,
    user_stats,
    weekly_leaderboard,
)
from tests.conftest import (
    make_game,
    make_group,
    make_pick,
    make_user,
    register_user,
    setup_group,
)


def game(week, n):
    return make_game(
        week=week,
        home=f"Home {week}-{n}",
        away=f"Away {week}-{n}",
        game_time=datetime(2025, 9, 10 + week, n),
        home_score=20,
        away_score=10,
        is_completed=True,
    )


class TestAccuracy:
    def test_rounds_half_up(self):
        assert accuracy(1, 8) == 13
        assert accuracy(1, 2) == 50
        assert accuracy(2, 3) == 67
        assert accuracy(1, 3) == 33

    def test_no_picks_is_zero(self):
        assert accuracy(0, 0) == 0


class TestLeaderboards:
    def test_season_orders_by_correct_then_user_id(self, ctx):
        group, _ = make_group()
        alice = make_user(group, "alice")
        bob = make_user(group, "bob")
        carol = make_user(group, "carol")
        g1, g2 = game(1, 1), game(1, 2)

        make_pick(alice, g1, PickSide.AWAY, is_correct=False)
        make_pick(alice, g2, PickSide.HOME, is_correct=True)
        make_pick(bob, g1, PickSide.HOME, is_correct=True)
        make_pick(bob, g2, PickSide.HOME, is_correct=True)
        make_pick(carol, g1, PickSide.HOME, is_correct=True)

        rows = season_leaderboard(group.id)
        assert [r["username"] for r in rows] == ["bob", "alice", "carol"]
        assert rows[0] == {
            "userId": bob.id,
            "username": "bob",
            "totalCorrect": 2,
            "totalPicks": 2,
        }
        # alice and carol tie on one correct pick; lower user id ranks first
        assert rows[1]["userId"] < rows[2]["userId"]

    def test_unscored_picks_do_not_count(self, ctx):
        group, _ = make_group()
        alice = make_user(group, "alice")
        pending = make_game(external_id="pending")
        make_pick(alice, pending, PickSide.HOME)

        assert season_leaderboard(group.id) == []

    def test_groups_are_isolated(self, ctx):
        office, _ = make_group("Office", code="OFFICE01")
        family, _ = make_group("Family", code="FAMILY01")
        alice = make_user(office, "alice")
        dave = make_user(family, "dave")
        g1 = game(1, 1)
        make_pick(alice, g1, PickSide.HOME, is_correct=True)
        make_pick(dave, g1, PickSide.HOME, is_correct=True)

        assert [r["username"] for r in season_leaderboard(office.id)] == ["alice"]
        assert [r["username"] for r in season_leaderboard(family.id)] == ["dave"]

    def test_weekly_counts_only_that_week(self, ctx):
        group, _ = make_group()
        alice = make_user(group, "alice")
        make_pick(alice, game(1, 1), PickSide.HOME, is_correct=True)
        make_pick(alice, game(2, 1), PickSide.AWAY, is_correct=False)
        make_pick(alice, game(2, 2), PickSide.HOME, is_correct=True)

        rows = weekly_leaderboard(group.id, 2)
        assert rows == [
            {
                "userId": alice.id,
                "username": "alice",
                "totalCorrect": 1,
                "weeklyCorrect": 1,
                "weeklyPicks": 2,
            }
        ]

    def test_user_stats(self, ctx):
        group, _ = make_group()
        alice = make_user(group, "alice")
        make_pick(alice, game(1, 1), PickSide.HOME, is_correct=True)
        make_pick(alice, game(1, 2), PickSide.HOME, is_correct=True)
        make_pick(alice, game(1, 3), PickSide.AWAY, is_correct=False)
        make_pick(alice, game(2, 1), PickSide.AWAY, is_correct=False)

        stats = user_stats(alice.id)
        assert stats["overall"] == {"totalPicks": 4, "totalCorrect": 2, "accuracy": 50}
        assert stats["weekly"] == [
            {"week": 1, "picks": 3, "correct": 2, "accuracy": 67},
            {"week": 2, "picks": 1, "correct": 0, "accuracy": 0},
        ]

    def test_user_stats_without_picks(self, ctx):
        group, _ = make_group()
        alice = make_user(group, "alice")
        stats = user_stats(alice.id)
        assert stats["overall"] == {"totalPicks": 0, "totalCorrect": 0, "accuracy": 0}
        assert stats["weekly"] == []


class TestLeaderboardAPI:
    def test_season_and_week(self, client):
        setup_group(client)
        headers, _ = register_user(client)

        resp = client.get("/api/leaderboard", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json() == []

        assert client.get("/api/leaderboard/week/3", headers=headers).status_code == 200
        assert client.get("/api/leaderboard/week/19", headers=headers).status_code == 400

    def test_stats_limited_to_own_group(self, client):
        setup_group(client, "Office", code="OFFICE01")
        setup_group(client, "Family", code="FAMILY01")
        alice_headers, alice = register_user(client, "alice", code="OFFICE01")
        _, bob = register_user(client, "bob", code="OFFICE01")
        _, dave = register_user(client, "dave", code="FAMILY01")

        resp = client.get(f"/api/leaderboard/user/{bob['id']}/stats", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.get_json()["username"] == "bob"

        resp = client.get(f"/api/leaderboard/user/{dave['id']}/stats", headers=alice_headers)
        assert resp.status_code == 404

    def test_requires_auth(self, client):
        assert client.get("/api/leaderboard").status_code == 401
