"""Actor switching over HTTP: IDLE -> PENDING -> ACTIVE and what the active owner may do."""

from __future__ import annotations

import uuid

from _helpers import act_as, bearer, create_org, signup

API = "/api/v1"


def test_fresh_session_is_idle_as_personal_owner(client):
    ada = signup(client, "ada")

    resp = client.get(f"{API}/session/active-owner", headers=bearer(ada["token"]))

    assert resp.status_code == 200
    body = resp.json()
    assert body["state"] == "IDLE"
    assert body["kind"] == "PERSON"
    assert body["owner_id"] == ada["owner_id"]
    assert body["data"]["kind"] == "PERSON"
    assert body["data"]["handle"] == "ada"


def test_switch_to_organization_and_publish_as_it(client):
    """X creates Acme, switches to its owner, and the project is attributed to Acme."""
    x = signup(client, "xavier")
    y = signup(client, "yolanda")
    created = create_org(client, x["token"], "Acme", "acme")
    o2 = created["owner_id"]

    pending = client.put(
        f"{API}/session/active-owner", json={"owner_id": o2}, headers=bearer(x["token"])
    )
    assert pending.status_code == 200
    assert pending.json()["state"] == "PENDING"
    assert pending.json()["kind"] == "ORGANIZATION"

    # nothing changes until the switch is committed
    still_idle = client.get(f"{API}/session/active-owner", headers=bearer(x["token"]))
    assert still_idle.json()["owner_id"] == x["owner_id"]

    committed = client.post(
        f"{API}/session/refresh",
        json={"switch_token": pending.json()["switch_token"]},
        headers=bearer(x["token"]),
    )
    assert committed.status_code == 200
    assert committed.json()["active_owner_id"] == o2
    acme_token = committed.json()["access_token"]

    active = client.get(f"{API}/session/active-owner", headers=bearer(acme_token)).json()
    assert active["state"] == "ACTIVE"
    assert active["kind"] == "ORGANIZATION"
    assert active["data"]["slug"] == "acme"

    project = client.post(
        f"{API}/projects", json={"title": "Rocket"}, headers=bearer(acme_token)
    )
    assert project.status_code == 201
    assert project.json()["owner_id"] == o2
    assert project.json()["owner"]["kind"] == "ORGANIZATION"
    project_id = project.json()["id"]

    denied = client.patch(
        f"{API}/projects/{project_id}", json={"title": "Mine"}, headers=bearer(y["token"])
    )
    assert denied.status_code == 403
    assert denied.json()["code"] == "FORBIDDEN"

    # the same person acting as themselves is a different owner
    denied = client.patch(
        f"{API}/projects/{project_id}", json={"title": "Mine"}, headers=bearer(x["token"])
    )
    assert denied.status_code == 403

    ok = client.patch(
        f"{API}/projects/{project_id}", json={"title": "Rocket II"}, headers=bearer(acme_token)
    )
    assert ok.status_code == 200
    assert ok.json()["title"] == "Rocket II"


def test_switch_to_someone_elses_owner_is_forbidden(client):
    ada = signup(client, "ada")
    bob = signup(client, "bob")

    resp = client.put(
        f"{API}/session/active-owner",
        json={"owner_id": bob["owner_id"]},
        headers=bearer(ada["token"]),
    )

    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"


def test_switch_to_unknown_owner_is_forbidden(client):
    ada = signup(client, "ada")

    resp = client.put(
        f"{API}/session/active-owner",
        json={"owner_id": str(uuid.uuid4())},
        headers=bearer(ada["token"]),
    )

    assert resp.status_code == 403


def test_invalid_switch_token_is_unauthorized(client):
    ada = signup(client, "ada")

    resp = client.post(
        f"{API}/session/refresh",
        json={"switch_token": "not-a-token"},
        headers=bearer(ada["token"]),
    )

    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"


def test_switch_token_cannot_be_committed_by_another_person(client):
    ada = signup(client, "ada")
    bob = signup(client, "bob")
    created = create_org(client, ada["token"], "Acme", "acme")
    pending = client.put(
        f"{API}/session/active-owner",
        json={"owner_id": created["owner_id"]},
        headers=bearer(ada["token"]),
    )

    resp = client.post(
        f"{API}/session/refresh",
        json={"switch_token": pending.json()["switch_token"]},
        headers=bearer(bob["token"]),
    )

    assert resp.status_code == 403


def test_access_token_is_not_a_switch_token(client):
    ada = signup(client, "ada")

    resp = client.post(
        f"{API}/session/refresh",
        json={"switch_token": ada["token"]},
        headers=bearer(ada["token"]),
    )

    assert resp.status_code == 401


def test_switch_back_to_personal_owner(client):
    ada = signup(client, "ada")
    created = create_org(client, ada["token"], "Acme", "acme")
    acme_token = act_as(client, ada["token"], created["owner_id"])

    personal_token = act_as(client, acme_token, None)

    body = client.get(f"{API}/session/active-owner", headers=bearer(personal_token)).json()
    assert body["owner_id"] == ada["owner_id"]
    assert body["kind"] == "PERSON"


def test_revoked_membership_falls_back_to_personal_owner(client):
    ada = signup(client, "ada")
    bob = signup(client, "bob")
    created = create_org(client, ada["token"], "Acme", "acme")
    org_id = created["organization"]["id"]
    added = client.post(
        f"{API}/organizations/{org_id}/members",
        json={"person_id": bob["person_id"], "role": "MEMBER"},
        headers=bearer(ada["token"]),
    )
    assert added.status_code == 201
    bob_org_owner = added.json()["owner_id"]
    bob_acme_token = act_as(client, bob["token"], bob_org_owner)

    removed = client.delete(
        f"{API}/organizations/{org_id}/members/{bob_org_owner}", headers=bearer(ada["token"])
    )
    assert removed.status_code == 204

    body = client.get(f"{API}/session/active-owner", headers=bearer(bob_acme_token)).json()
    assert body["owner_id"] == bob["owner_id"]
    assert body["state"] == "IDLE"

    # new content lands on the personal owner, never the revoked one
    project = client.post(f"{API}/projects", json={"title": "Mine"}, headers=bearer(bob_acme_token))
    assert project.json()["owner_id"] == bob["owner_id"]


def test_refresh_keeps_an_honored_active_owner(client):
    ada = signup(client, "ada")
    created = create_org(client, ada["token"], "Acme", "acme")
    pending = client.put(
        f"{API}/session/active-owner",
        json={"owner_id": created["owner_id"]},
        headers=bearer(ada["token"]),
    )
    committed = client.post(
        f"{API}/session/refresh",
        json={"switch_token": pending.json()["switch_token"]},
        headers=bearer(ada["token"]),
    ).json()

    refreshed = client.post(
        f"{API}/auth/refresh", json={"refresh_token": committed["refresh_token"]}
    )

    assert refreshed.status_code == 200
    assert refreshed.json()["active_owner_id"] == created["owner_id"]
    me = client.get(f"{API}/auth/me", headers=bearer(refreshed.json()["access_token"]))
    assert me.json()["active_owner"]["kind"] == "ORGANIZATION"


def test_my_organizations_lists_wearable_owners(client):
    ada = signup(client, "ada")
    created = create_org(client, ada["token"], "Acme", "acme")

    resp = client.get(f"{API}/me/organizations", headers=bearer(ada["token"]))

    assert resp.status_code == 200
    rows = resp.json()["organizations"]
    assert len(rows) == 1
    assert rows[0]["owner_id"] == created["owner_id"]
    assert rows[0]["role"] == "OWNER"
    assert rows[0]["organization"]["slug"] == "acme"
