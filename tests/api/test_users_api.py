"""User routes: session checks and cross-workplace access."""

from __future__ import annotations

from conftest import onboard


def _roles(client, auth):
    response = client.get(f"/v1/roles/{auth['workplace_id']}/roles", headers=auth["headers"])
    assert response.status_code == 200, response.text
    return {role["name"]: role["id"] for role in response.json()["data"]}


def test_user_routes_need_live_session(client, owner_auth):
    user_path = f"/v1/users/{owner_auth['user_id']}"
    assert client.get(user_path, headers=owner_auth["headers"]).status_code == 200

    client.post("/v1/auths/logout", headers=owner_auth["headers"])
    refreshed = client.post(
        "/v1/auths/refresh", json={"refresh_token": owner_auth["refresh_token"]}
    )
    assert refreshed.status_code == 200
    fresh = {"Authorization": f"Bearer {refreshed.json()['data']['access_token']}"}

    assert client.get("/v1/users/me", headers=fresh).status_code == 401
    assert client.get(user_path, headers=fresh).status_code == 401
    assert client.get("/v1/users/", headers=fresh).status_code == 401


def test_users_can_only_edit_themselves(client, api_mailer, owner_auth):
    mallory = onboard(client, api_mailer, "mallory@example.com", "Mallory Co", "Mal")
    owner_path = f"/v1/users/{owner_auth['user_id']}"

    renamed = client.put(owner_path, json={"first_name": "X"}, headers=mallory["headers"])
    assert renamed.status_code == 403
    assert client.delete(owner_path, headers=mallory["headers"]).status_code == 403

    updated = client.put(owner_path, json={"job_title": "Founder"}, headers=owner_auth["headers"])
    assert updated.status_code == 200
    assert updated.json()["data"]["job_title"] == "Founder"
    assert updated.json()["data"]["first_name"] == "Olive"


def test_outsider_cannot_read_roles_or_join_as_owner(client, api_mailer, owner_auth):
    owner_role_id = _roles(client, owner_auth)["owner"]
    mallory = onboard(client, api_mailer, "mallory@example.com", "Mallory Co", "Mal")
    victim = owner_auth["workplace_id"]

    listed = client.get(f"/v1/roles/{victim}/roles", headers=mallory["headers"])
    assert listed.status_code == 403

    joined = client.post(
        f"/v1/users/{mallory['user_id']}/workplaces",
        json={"workplace_id": victim, "role_id": owner_role_id},
        headers=mallory["headers"],
    )
    assert joined.status_code == 403
    assert client.get(f"/v1/roles/{victim}/user/role", headers=mallory["headers"]).status_code == 404

    kicked = client.delete(
        f"/v1/users/{owner_auth['user_id']}/workplaces/{victim}", headers=mallory["headers"]
    )
    assert kicked.status_code == 403


def test_owner_adds_and_removes_members(client, api_mailer, owner_auth):
    guest = onboard(client, api_mailer, "guest@example.com", "Guest Co", "Gus")
    workplace_id = owner_auth["workplace_id"]
    member_role_id = _roles(client, owner_auth)["member"]

    added = client.post(
        f"/v1/users/{guest['user_id']}/workplaces",
        json={"workplace_id": workplace_id, "role_id": member_role_id},
        headers=owner_auth["headers"],
    )
    assert added.status_code == 201, added.text
    assert added.json()["data"]["role_id"] == member_role_id

    role = client.get(f"/v1/roles/{workplace_id}/user/role", headers=guest["headers"])
    assert role.json()["data"]["role"] == "member"

    left = client.delete(
        f"/v1/users/{guest['user_id']}/workplaces/{workplace_id}", headers=guest["headers"]
    )
    assert left.status_code == 200
