from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from portfolio.models import VisitorSession
from portfolio.services.session_registry import resolve_session


def test_first_sight_creates_a_session(db_session):
    session_id = resolve_session(db_session, "f" * 32)

    row = db_session.query(VisitorSession).one()
    assert row.id == session_id
    assert len(session_id) == 36
    assert row.visit_count == 1
    assert row.first_seen == row.last_seen


def test_repeat_visits_share_one_row(db_session):
    ids = {resolve_session(db_session, "a" * 32) for _ in range(5)}

    assert len(ids) == 1
    rows = db_session.query(VisitorSession).all()
    assert len(rows) == 1
    assert rows[0].visit_count == 5
    assert rows[0].last_seen >= rows[0].first_seen


def test_different_fingerprints_get_different_sessions(db_session):
    first = resolve_session(db_session, "a" * 32)
    second = resolve_session(db_session, "b" * 32)
    assert first != second
    assert db_session.query(VisitorSession).count() == 2


def test_database_error_returns_none():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

    assert resolve_session(db, "c" * 32) is None
    db.rollback.assert_called_once()
