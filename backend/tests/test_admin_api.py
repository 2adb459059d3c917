from datetime import timedelta

import pytest

from portfolio.main import app
from portfolio.models import ChatConversation, ChatMessage, LinkClick, PageVisit, VisitorSession
from portfolio.routers.admin import MAX_DAYS, parse_days
from portfolio.utils.dependencies import get_current_admin
from portfolio.utils.time_utils import utcnow

from conftest import ADMIN


@pytest.fixture
def seeded(db_session):
    now = utcnow()
    old = now - timedelta(days=40)

    alice = VisitorSession(id="11111111-1111-1111-1111-111111111111", fingerprint="a" * 32, first_seen=now, last_seen=now)
    bob = VisitorSession(id="22222222-2222-2222-2222-222222222222", fingerprint="b" * 32, first_seen=now, last_seen=now)
    db_session.add_all([alice, bob])
    db_session.flush()

    db_session.add_all([
        PageVisit(session_id=alice.id, timestamp=now - timedelta(hours=1), country="Israel", country_code="IL", city="Tel Aviv", path="/"),
        PageVisit(session_id=alice.id, timestamp=now - timedelta(hours=2), country="Israel", country_code="IL", city="Haifa", path="/about"),
        PageVisit(session_id=bob.id, timestamp=now - timedelta(days=1), country="Germany", country_code="DE", city="Berlin", path="/"),
        PageVisit(session_id=None, timestamp=now - timedelta(days=2), country="Israel", country_code="IL", city="Tel Aviv", path="/"),
        PageVisit(session_id=bob.id, timestamp=old, country="France", country_code="FR", city="Paris", path="/"),
    ])
    db_session.add_all([
        LinkClick(session_id=alice.id, timestamp=now - timedelta(hours=1), link_url="https://github.com/example", link_label="GitHub"),
        LinkClick(session_id=bob.id, timestamp=now - timedelta(hours=3), link_url="https://github.com/example", link_label="GitHub"),
        LinkClick(session_id=None, timestamp=now - timedelta(hours=4), link_url="https://linkedin.com/in/example", link_label="LinkedIn"),
        LinkClick(session_id=None, timestamp=old, link_url="https://old.example", link_label="Old"),
    ])

    older = ChatConversation(session_id=alice.id, started_at=now - timedelta(days=3),
                             last_message_at=now - timedelta(days=3), message_count=2)
    newer = ChatConversation(session_id=bob.id, started_at=now - timedelta(hours=1),
                             last_message_at=now - timedelta(minutes=5), message_count=2)
    db_session.add_all([older, newer])
    db_session.flush()

    tick = now - timedelta(minutes=5)
    db_session.add_all([
        ChatMessage(conversation_id=newer.id, timestamp=tick, role="user", content="Where do you work?"),
        ChatMessage(conversation_id=newer.id, timestamp=tick, role="assistant", content="At a startup.", prompt_tokens=90, completion_tokens=5),
        ChatMessage(conversation_id=older.id, timestamp=now - timedelta(days=3), role="user", content="Hi"),
        ChatMessage(conversation_id=older.id, timestamp=now - timedelta(days=3), role="assistant", content="Hello!"),
    ])
    db_session.commit()
    return {"older": older.id, "newer": newer.id}


def test_summary_counts_the_window(admin_client, seeded):
    body = admin_client.get("/api/admin/analytics/summary").json()

    assert body["period"]["days"] == 30
    assert body["visits"] == {"total": 4, "uniqueVisitors": 2}
    assert body["clicks"] == {"total": 3}
    assert body["chat"] == {"conversations": 2, "messages": 4}


def test_summary_respects_days(admin_client, seeded):
    body = admin_client.get("/api/admin/analytics/summary", params={"days": 60}).json()
    assert body["period"]["days"] == 60
    assert body["visits"]["total"] == 5
    assert body["clicks"]["total"] == 4


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_bad_days_fall_back_to_default(admin_client, seeded, value):
    body = admin_client.get("/api/admin/analytics/summary", params={"days": value}).json()
    assert body["period"]["days"] == 30


def test_parse_days():
    assert parse_days(None, 30) == 30
    assert parse_days("7", 30) == 7
    assert parse_days("x", 7) == 7
    assert parse_days("0", 7) == 7


def test_daily_series_is_ascending(admin_client, seeded):
    body = admin_client.get("/api/admin/analytics/daily").json()

    dates = [row["date"] for row in body["dailyVisits"]]
    assert dates == sorted(dates)
    assert sum(row["visits"] for row in body["dailyVisits"]) == 4
    assert sum(row["clicks"] for row in body["dailyClicks"]) == 3
    assert all(len(row["date"]) == 10 for row in body["dailyVisits"])


def test_geo_breakdown_is_descending(admin_client, seeded):
    body = admin_client.get("/api/admin/analytics/geo").json()

    assert body["byCountry"][0] == {"country": "Israel", "countryCode": "IL", "visitCount": 3}
    assert body["byCountry"][1] == {"country": "Germany", "countryCode": "DE", "visitCount": 1}
    assert body["byCity"][0] == {"city": "Tel Aviv", "country": "Israel", "visitCount": 2}
    assert len(body["byCity"]) == 3


def test_click_breakdown(admin_client, seeded):
    body = admin_client.get("/api/admin/analytics/clicks").json()
    assert body["clicksByLink"] == [
        {"linkUrl": "https://github.com/example", "linkLabel": "GitHub", "clickCount": 2},
        {"linkUrl": "https://linkedin.com/in/example", "linkLabel": "LinkedIn", "clickCount": 1},
    ]


def test_visit_listing_is_newest_first_and_paginated(admin_client, seeded):
    body = admin_client.get("/api/admin/analytics/visits").json()
    assert len(body["visits"]) == 4
    stamps = [v["timestamp"] for v in body["visits"]]
    assert stamps == sorted(stamps, reverse=True)

    page = admin_client.get("/api/admin/analytics/visits", params={"limit": 2, "offset": 1}).json()
    assert [v["id"] for v in page["visits"]] == [v["id"] for v in body["visits"][1:3]]


def test_conversations_are_most_recent_first(admin_client, seeded):
    body = admin_client.get("/api/admin/analytics/conversations").json()
    assert [c["id"] for c in body["conversations"]] == [seeded["newer"], seeded["older"]]
    assert body["conversations"][0]["messageCount"] == 2


def test_conversation_detail_orders_messages(admin_client, seeded):
    body = admin_client.get(f"/api/admin/analytics/conversations/{seeded['newer']}").json()

    assert body["conversation"]["id"] == seeded["newer"]
    assert [m["role"] for m in body["messages"]] == ["user", "assistant"]
    assert body["messages"][1]["promptTokens"] == 90


def test_unknown_conversation_is_404(admin_client, seeded):
    res = admin_client.get("/api/admin/analytics/conversations/9999")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "NOT_FOUND"


def test_empty_database_gives_zeroes(admin_client):
    body = admin_client.get("/api/admin/analytics/summary").json()
    assert body["visits"] == {"total": 0, "uniqueVisitors": 0}
    assert admin_client.get("/api/admin/analytics/geo").json() == {"byCountry": [], "byCity": []}


@pytest.mark.parametrize("path", ["summary", "daily", "geo", "clicks", "visits", "conversations", "conversations/1"])
def test_admin_endpoints_require_login(client, path):
    res = client.get(f"/api/admin/analytics/{path}")

    assert res.status_code == 401
    body = res.json()
    assert body["authenticated"] is False
    assert body["loginUrl"] == "/api/auth/google"


def test_admin_without_database_is_503(no_db_client):
    app.dependency_overrides[get_current_admin] = lambda: ADMIN
    res = no_db_client.get("/api/admin/analytics/summary")
    assert res.status_code == 503
    assert res.json()["error"]["code"] == "SERVICE_UNAVAILABLE"


def test_huge_window_is_capped(admin_client, seeded):
    res = admin_client.get("/api/admin/analytics/summary", params={"days": 999999999})

    assert res.status_code == 200
    assert res.json()["period"]["days"] == MAX_DAYS
    assert res.json()["visits"]["total"] == 5
    assert parse_days("999999999", 30) == MAX_DAYS
