from fastapi.testclient import TestClient
from sqlmodel import Session, select

from hackhub.models import TemplateConfig, UserRole
from hackhub.tests.utils import API, auth_headers, create_user


def admin_headers(db: Session) -> dict[str, str]:
    return auth_headers(create_user(db, role=UserRole.admin))


def test_clone_built_in_feedback_form(client: TestClient, db: Session) -> None:
    headers = admin_headers(db)

    first = client.post(f"{API}/admin/feedback-forms/standard-participant-feedback/clone", headers=headers)
    second = client.post(f"{API}/admin/feedback-forms/standard-participant-feedback/clone", headers=headers)

    assert first.status_code == 200
    assert first.json()["slug"] == "standard-participant-feedback-copy"
    assert first.json()["name"] == "Standard Participant Feedback (Copy)"
    assert first.json()["is_built_in"] is False
    assert second.json()["slug"] == "standard-participant-feedback-copy-1"
    assert len(first.json()["sections"]) == 3


def test_clone_with_taken_slug_gets_suffix(client: TestClient, db: Session) -> None:
    headers = admin_headers(db)
    url = f"{API}/admin/feedback-forms/standard-participant-feedback/clone"

    first = client.post(url, headers=headers, json={"slug": "standard-partner-feedback"})
    second = client.post(url, headers=headers, json={"slug": "standard-partner-feedback"})

    assert first.status_code == 200
    assert first.json()["slug"] == "standard-partner-feedback-1"
    assert second.json()["slug"] == "standard-partner-feedback-2"


def test_built_in_forms_are_read_only(client: TestClient, db: Session) -> None:
    headers = admin_headers(db)

    r = client.patch(
        f"{API}/admin/feedback-forms/standard-participant-feedback",
        headers=headers,
        json={"name": "Mine now"},
    )
    assert r.status_code == 403

    r = client.delete(f"{API}/admin/registration-forms/standard-registration", headers=headers)
    assert r.status_code == 403


def test_create_form_with_invalid_slug(client: TestClient, db: Session) -> None:
    r = client.post(
        f"{API}/admin/feedback-forms",
        headers=admin_headers(db),
        json={"name": "Bad", "slug": "Not A Slug"},
    )

    assert r.status_code == 422


def test_clone_registration_form_by_id(client: TestClient, db: Session) -> None:
    headers = admin_headers(db)
    source = client.get(f"{API}/admin/registration-forms/standard-registration", headers=headers).json()

    r = client.post(
        f"{API}/admin/registration-forms/{source['id']}/clone",
        headers=headers,
        json={"name": "Spring Registration", "slug": "spring-registration"},
    )

    assert r.status_code == 200
    assert r.json()["slug"] == "spring-registration"
    assert r.json()["tier1"] == source["tier1"]


def test_template_default_is_exclusive(client: TestClient, db: Session) -> None:
    headers = admin_headers(db)

    r = client.post(
        f"{API}/admin/templates/",
        headers=headers,
        json={"name": "Minimal", "slug": "minimal", "is_default": True},
    )
    assert r.status_code == 200

    db.expire_all()
    defaults = db.exec(select(TemplateConfig.slug).where(TemplateConfig.is_default == True)).all()  # noqa: E712
    assert defaults == ["minimal"]

    r = client.patch(f"{API}/admin/templates/modern", headers=headers, json={"is_default": True})
    assert r.status_code == 200
    db.expire_all()
    defaults = db.exec(select(TemplateConfig.slug).where(TemplateConfig.is_default == True)).all()  # noqa: E712
    assert defaults == ["modern"]


def test_cloned_template_remembers_base(client: TestClient, db: Session) -> None:
    source = client.get(f"{API}/admin/templates/tech", headers=admin_headers(db)).json()
    r = client.post(f"{API}/admin/templates/tech/clone", headers=admin_headers(db))

    assert r.status_code == 200
    clone = r.json()
    assert clone["base_template"] == "tech"
    assert clone["is_default"] is False
    assert clone["is_built_in"] is False
    assert clone["id"] != source["id"]
    for field in ("colors", "typography", "sections", "cards", "hero", "description"):
        assert clone[field] == source[field]


def test_organizers_cannot_create_forms(client: TestClient, db: Session) -> None:
    r = client.post(
        f"{API}/admin/feedback-forms",
        headers=auth_headers(create_user(db, role=UserRole.organizer)),
        json={"name": "Org Form", "slug": "org-form"},
    )

    assert r.status_code == 403
