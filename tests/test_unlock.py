import threading

import pytest

from achievement_tracker import database
from achievement_tracker.database import get_sessionmaker
from achievement_tracker.errors import AchievementNotFound, InternalError
from achievement_tracker.models.achievement import UserAchievement
from achievement_tracker.services.achievements import (
    create_achievement,
    find_achievement_by_id,
    list_achievements,
    list_unlocked_achievements,
    unlock_achievement,
)
from achievement_tracker.services.tokens import issue_token
from achievement_tracker.services.users import register_user, verify_credentials
from achievement_tracker.auth import authenticate


def test_find_achievement_by_id(db_session, make_achievement):
    achievement = make_achievement(name="Trailblazer")

    found = find_achievement_by_id(db_session, achievement.id)
    assert found.name == "Trailblazer"

    with pytest.raises(AchievementNotFound):
        find_achievement_by_id(db_session, 9999)


def test_unlock_twice_is_idempotent(db_session, make_achievement):
    user = register_user(db_session, "alice", "pw1")
    achievement = make_achievement()

    unlock_achievement(db_session, user.id, achievement.id, now=1_700_000_000)
    unlock_achievement(db_session, user.id, achievement.id, now=1_700_000_500)

    rows = db_session.query(UserAchievement).filter_by(user_id=user.id).all()
    assert len(rows) == 1
    assert rows[0].unlocked is True
    assert rows[0].time_unlocked == 1_700_000_500


def test_unlock_defaults_to_current_time(db_session, make_achievement, monkeypatch):
    import achievement_tracker.services.achievements as achievements_service

    user = register_user(db_session, "alice", "pw1")
    achievement = make_achievement()
    monkeypatch.setattr(achievements_service.time, "time", lambda: 1234.9)

    unlock_achievement(db_session, user.id, achievement.id)

    row = db_session.get(UserAchievement, (user.id, achievement.id))
    assert row.time_unlocked == 1234


def test_unlock_missing_achievement_writes_nothing(db_session):
    user = register_user(db_session, "alice", "pw1")

    with pytest.raises(AchievementNotFound):
        unlock_achievement(db_session, user.id, 9999)
    assert db_session.query(UserAchievement).count() == 0


def test_unlocked_listing_is_per_user(db_session, make_achievement):
    alice = register_user(db_session, "alice", "pw1")
    bob = register_user(db_session, "bob", "pw2")
    first = make_achievement(name="First")
    second = make_achievement(name="Second")

    unlock_achievement(db_session, alice.id, first.id, now=10)
    unlock_achievement(db_session, bob.id, second.id, now=20)

    alice_unlocked = list_unlocked_achievements(db_session, alice.id)
    assert [entry["name"] for entry in alice_unlocked] == ["First"]
    assert list_unlocked_achievements(db_session, bob.id)[0]["achievement_id"] == second.id


def test_locked_rows_are_not_listed(db_session, make_achievement):
    alice = register_user(db_session, "alice", "pw1")
    achievement = make_achievement()
    db_session.add(
        UserAchievement(user_id=alice.id, achievement_id=achievement.id, unlocked=False, time_unlocked=0)
    )
    db_session.commit()

    assert list_unlocked_achievements(db_session, alice.id) == []


def test_list_achievements_respects_limit(db_session):
    for index in range(5):
        create_achievement(db_session, f"Achievement {index}", "https://img.example/a.png")

    assert len(list_achievements(db_session)) == 5
    limited = list_achievements(db_session, limit=3)
    assert [a.name for a in limited] == ["Achievement 0", "Achievement 1", "Achievement 2"]


def test_register_login_unlock_scenario(db_session, make_achievement):
    make_achievement(name="Hello World")
    register_user(db_session, "alice", "pw1")

    user = verify_credentials(db_session, "alice", "pw1")
    token = issue_token(db_session, user.username)
    alice = authenticate(db_session, token)

    achievement = find_achievement_by_id(db_session, 1)
    unlock_achievement(db_session, alice.id, achievement.id)

    unlocked = list_unlocked_achievements(db_session, alice.id)
    assert len(unlocked) == 1
    assert unlocked[0]["achievement_id"] == 1
    assert unlocked[0]["unlocked"] is True


def test_concurrent_unlocks_leave_one_row(db_session, make_achievement):
    user_id = register_user(db_session, "alice", "pw1").id
    achievement_id = make_achievement().id
    SessionLocal = get_sessionmaker()
    failures = []

    def unlock(stamp):
        db = SessionLocal()
        try:
            unlock_achievement(db, user_id, achievement_id, now=stamp)
        except Exception as exc:
            failures.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=unlock, args=(1000 + i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert failures == []
    db_session.expire_all()
    rows = db_session.query(UserAchievement).all()
    assert len(rows) == 1
    assert rows[0].unlocked is True
    assert 1000 <= rows[0].time_unlocked < 1008


def test_unsupported_dialect_is_internal_error(db_session, make_achievement, monkeypatch):
    user = register_user(db_session, "alice", "pw1")
    achievement = make_achievement()
    monkeypatch.setattr(database, "_INSERT_BY_DIALECT", {})

    with pytest.raises(InternalError):
        unlock_achievement(db_session, user.id, achievement.id)
    assert db_session.query(UserAchievement).count() == 0


def test_repeat_unlock_overwrites_timestamp_with_now(db_session, make_achievement):
    user = register_user(db_session, "alice", "pw1")
    achievement = make_achievement()

    unlock_achievement(db_session, user.id, achievement.id, now=500)
    unlock_achievement(db_session, user.id, achievement.id, now=100)

    row = db_session.get(UserAchievement, (user.id, achievement.id))
    assert row.time_unlocked == 100
