from portfolio.models import LinkClick, PageVisit, VisitorSession
from portfolio.services.fingerprint import hash_client_fingerprint

BROWSER = {"User-Agent": "Mozilla/5.0 (Macintosh) Safari/605.1.15", "Accept-Language": "en-US,en;q=0.9"}


def test_visit_creates_session_and_visit(client, db_session):
    res = client.post("/api/analytics/visit", json={"path": "/projects"}, headers=BROWSER)

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["sessionId"]
    assert body["visitId"]

    visit = db_session.query(PageVisit).one()
    assert visit.path == "/projects"
    assert visit.session_id == body["sessionId"]
    assert visit.user_agent == BROWSER["User-Agent"]


def test_same_browser_same_day_shares_a_session(client, db_session):
    first = client.post("/api/analytics/visit", json={}, headers=BROWSER).json()
    second = client.post("/api/analytics/visit", json={"path": "/about"}, headers=BROWSER).json()

    assert first["sessionId"] == second["sessionId"]
    session = db_session.query(VisitorSession).one()
    assert session.visit_count == 2
    assert db_session.query(PageVisit).count() == 2


def test_client_fingerprint_is_stored_hashed(client, db_session):
    raw = "0123456789abcdef0123456789abcdef"
    client.post("/api/analytics/visit", json={"fingerprint": raw}, headers=BROWSER)

    session = db_session.query(VisitorSession).one()
    assert session.fingerprint == hash_client_fingerprint(raw)
    assert session.fingerprint != raw


def test_visit_defaults_and_referrer_precedence(client, db_session):
    client.post("/api/analytics/visit", json={"referrer": "https://body.example"}, headers=BROWSER)
    client.post(
        "/api/analytics/visit",
        json={"referrer": "https://body.example"},
        headers={**BROWSER, "Referer": "https://www.linkedin.com/"},
    )
    client.post("/api/analytics/visit", json={}, headers=BROWSER)

    visits = db_session.query(PageVisit).order_by(PageVisit.id).all()
    assert [v.referrer for v in visits] == ["https://body.example", "https://www.linkedin.com/", ""]
    assert all(v.path == "/" for v in visits)


def test_public_ip_is_geolocated(client, db_session, geo_service):
    client.post("/api/analytics/visit", json={}, headers={**BROWSER, "X-Forwarded-For": "8.8.8.8, 10.0.0.1"})

    visit = db_session.query(PageVisit).one()
    assert visit.ip_address == "8.8.8.8"
    assert (visit.country, visit.country_code, visit.city, visit.region) == ("Israel", "IL", "Tel Aviv", "Tel Aviv")
    assert len(geo_service.requests) == 1


def test_private_ip_visit_has_no_location(client, db_session, geo_service):
    client.post("/api/analytics/visit", json={}, headers={**BROWSER, "X-Forwarded-For": "192.168.1.20"})

    visit = db_session.query(PageVisit).one()
    assert visit.country is None
    assert geo_service.requests == []


def test_click_is_recorded(client, db_session):
    visit = client.post("/api/analytics/visit", json={}, headers=BROWSER).json()
    res = client.post("/api/analytics/click", json={
        "sessionId": visit["sessionId"],
        "linkUrl": "https://github.com/example",
        "linkLabel": "GitHub",
        "referrerPath": "/",
    })

    assert res.status_code == 200
    assert res.json()["success"] is True
    click = db_session.query(LinkClick).one()
    assert click.id == res.json()["clickId"]
    assert click.session_id == visit["sessionId"]
    assert click.link_label == "GitHub"


def test_click_without_session_is_kept(client, db_session):
    res = client.post("/api/analytics/click", json={"linkUrl": "mailto:me@example.com"})
    assert res.status_code == 200
    assert db_session.query(LinkClick).one().session_id is None


def test_click_without_url_is_rejected(client, db_session):
    res = client.post("/api/analytics/click", json={"linkLabel": "GitHub"})

    assert res.status_code == 400
    assert res.json()["detail"] == "linkUrl is required"
    assert db_session.query(LinkClick).count() == 0


def test_without_database_writes_are_reported_noops(no_db_client):
    visit = no_db_client.post("/api/analytics/visit", json={}, headers=BROWSER)
    click = no_db_client.post("/api/analytics/click", json={"linkUrl": "https://example.com"})

    for res in (visit, click):
        assert res.status_code == 200
        assert res.json()["success"] is False
        assert res.json()["message"] == "Database not configured"
