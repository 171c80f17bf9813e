"""Tests for on-disk session records and the active-session marker."""

import json

import pytest

from eureka_tracker.core.exceptions import SessionStoreError
from eureka_tracker.core.session_store import SessionStore
from eureka_tracker.models.session import WorkSession


@pytest.fixture
def store(plain_dir):
    return SessionStore(plain_dir)


def _session(task_id, **kwargs):
    defaults = {"git_baseline": "abc123", "branch": "feature/x", "git_tracked": True}
    defaults.update(kwargs)
    return WorkSession(task_id=task_id, **defaults)


def test_persist_writes_record_and_marker(store):
    session = _session("T1")

    store.persist(session)

    record = json.loads(store.record_path("T1").read_text())
    assert record["taskId"] == "T1"
    assert record["gitBaseline"] == "abc123"
    assert record["gitTracked"] is True
    marker = store.read_marker()
    assert marker["taskId"] == "T1"
    assert marker["sessionId"] == session.session_id
    assert "pid" in marker


def test_persist_is_an_idempotent_upsert(store):
    store.persist(_session("T1"))
    store.persist(_session("T1", branch="feature/y"))

    sessions = store.load_all()
    assert list(sessions) == ["T1"]
    assert sessions["T1"].branch == "feature/y"


def test_marker_follows_latest_session(store):
    store.persist(_session("T1"))
    store.persist(_session("T2"))

    assert store.read_marker()["taskId"] == "T2"


def test_remove_deletes_record_and_own_marker(store):
    store.persist(_session("T1"))

    store.remove("T1")

    assert not store.record_path("T1").exists()
    assert not store.has_marker()
    assert store.load_all() == {}


def test_remove_keeps_marker_of_other_task(store):
    store.persist(_session("T1"))
    store.persist(_session("T2"))

    store.remove("T1")

    assert store.read_marker()["taskId"] == "T2"
    assert list(store.load_all()) == ["T2"]


def test_remove_missing_task_is_harmless(store):
    store.remove("nothing")

    assert store.load_all() == {}


def test_load_all_round_trips_sessions(store):
    session = _session("T1")
    untracked = _session("T2", git_baseline=None, branch=None, git_tracked=False)
    store.persist(session)
    store.persist(untracked)

    loaded = SessionStore(store.workspace_path).load_all()

    assert loaded["T1"] == session
    assert loaded["T2"] == untracked


def test_load_all_skips_corrupt_records(store, caplog):
    store.persist(_session("T1"))
    (store.sessions_dir / "broken.json").write_text("{not json")
    (store.sessions_dir / "wrong.json").write_text(json.dumps({"startedAt": "x"}))

    loaded = store.load_all()

    assert list(loaded) == ["T1"]
    assert "corrupt_session_record" in caplog.text


def test_task_ids_are_made_filename_safe(store):
    store.persist(_session("team/T 1"))

    assert store.record_path("team/T 1").parent == store.sessions_dir
    assert list(store.load_all()) == ["team/T 1"]


def test_corrupt_marker_reads_as_none(store):
    store.marker_path.write_text("garbage")

    assert store.read_marker() is None


def test_persist_failure_raises_store_error(plain_dir):
    (plain_dir / "blocked").write_text("a file, not a directory")
    store = SessionStore(plain_dir, sessions_dir_name="blocked")

    with pytest.raises(SessionStoreError):
        store.persist(_session("T1"))


def test_write_marker_points_at_session(store):
    store.persist(_session("T1"))
    first = store.load_all()["T1"]
    store.persist(_session("T2"))

    store.write_marker(first)

    assert store.read_marker()["taskId"] == "T1"
    assert store.read_marker()["sessionId"] == first.session_id
    assert sorted(store.load_all()) == ["T1", "T2"]
