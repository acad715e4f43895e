from fastapi.testclient import TestClient
from sqlmodel import Session

from hackhub.models import UserRole
from hackhub.tests.utils import API, auth_headers, create_event, create_project, create_team, create_user, register

PARTNER = {
    "name": "Acme Cloud",
    "description": "Databases for builders.",
    "industry": "Cloud",
    "tier": "gold",
    "contacts": [{"name": "Pat", "email": "pat@acme.dev", "role": "DevRel", "is_primary": True}],
}


def create_partner(client: TestClient, headers: dict) -> dict:
    r = client.post(f"{API}/partners/", headers=headers, json=PARTNER)
    assert r.status_code == 200
    return r.json()


def test_partner_names_are_unique(client: TestClient, db: Session) -> None:
    headers = auth_headers(create_user(db, role=UserRole.admin))
    create_partner(client, headers)

    r = client.post(f"{API}/partners/", headers=headers, json=PARTNER)

    assert r.status_code == 409


def test_partner_search(client: TestClient, db: Session) -> None:
    headers = auth_headers(create_user(db, role=UserRole.admin))
    create_partner(client, headers)

    found = client.get(f"{API}/partners/", headers=headers, params={"search": "builders"}).json()
    missing = client.get(f"{API}/partners/", headers=headers, params={"tier": "bronze"}).json()

    assert found["count"] == 1
    assert found["data"][0]["contacts"][0]["email"] == "pat@acme.dev"
    assert missing["count"] == 0


def test_sponsored_prize_records_engagement(client: TestClient, db: Session) -> None:
    headers = auth_headers(create_user(db, role=UserRole.admin))
    partner = create_partner(client, headers)
    event = create_event(db)

    r = client.post(
        f"{API}/prizes/",
        headers=headers,
        json={
            "event_id": str(event.id),
            "partner_id": partner["id"],
            "title": "Best use of Acme",
            "description": "Build something on Acme Cloud.",
            "category": "sponsor",
        },
    )
    assert r.status_code == 200

    partner = client.get(f"{API}/partners/{partner['id']}", headers=headers).json()
    assert partner["engagement"]["events_participated"] == [str(event.id)]
    assert partner["engagement"]["prizes_offered"] == [r.json()["id"]]


def test_inactive_prizes_hidden_from_public(client: TestClient, db: Session) -> None:
    headers = auth_headers(create_user(db, role=UserRole.organizer))
    event = create_event(db)
    for title, active in (("Grand prize", True), ("Old prize", False)):
        client.post(
            f"{API}/prizes/",
            headers=headers,
            json={
                "event_id": str(event.id),
                "title": title,
                "description": "Something shiny.",
                "category": "grand",
                "is_active": active,
            },
        )

    public = client.get(f"{API}/prizes/", params={"event_id": str(event.id)}).json()
    staff = client.get(f"{API}/prizes/", headers=headers, params={"event_id": str(event.id)}).json()

    assert [p["title"] for p in public["data"]] == ["Grand prize"]
    assert staff["count"] == 2


def test_award_prize(client: TestClient, db: Session) -> None:
    headers = auth_headers(create_user(db, role=UserRole.organizer))
    event, other_event = create_event(db), create_event(db, name="Autumn Hack")
    leader = create_user(db)
    register(db, event, leader)
    project = create_project(db, event, create_team(db, event, leader))
    prize_id = client.post(
        f"{API}/prizes/",
        headers=headers,
        json={
            "event_id": str(other_event.id),
            "title": "Grand prize",
            "description": "Something shiny.",
            "category": "grand",
        },
    ).json()["id"]

    r = client.post(f"{API}/prizes/{prize_id}/winners", headers=headers, json={"project_id": str(project.id)})
    assert r.status_code == 400

    client.patch(f"{API}/prizes/{prize_id}", headers=headers, json={"title": "Grand prize 2026"})
    own_prize = client.post(
        f"{API}/prizes/",
        headers=headers,
        json={"event_id": str(event.id), "title": "Track prize", "description": "For the track.", "category": "track"},
    ).json()["id"]

    r = client.post(f"{API}/prizes/{own_prize}/winners", headers=headers, json={"project_id": str(project.id)})
    assert r.status_code == 200
    assert r.json()["winners"][0]["team_id"] == str(project.team_id)

    r = client.post(f"{API}/prizes/{own_prize}/winners", headers=headers, json={"project_id": str(project.id)})
    assert r.status_code == 409
