"""Group activity feed and workplace lounge through the HTTP API."""

from __future__ import annotations

import pytest

from conftest import onboard


def _join(client, mailer, owner_auth, email) -> dict:
    """Invite *email* into the owner's workplace and accept it."""
    created = client.post(
        f"/v1/workplaces/{owner_auth['workplace_id']}/invitations",
        json={"email": email},
        headers=owner_auth["headers"],
    )
    assert created.status_code == 201, created.text
    token = mailer.last("workplace_invitation")["data"]["invitation_link"].split("token=", 1)[1]
    accepted = client.post("/v1/auths/invitations/accept", json={"token": token, "email": email})
    assert accepted.status_code == 200, accepted.text
    data = accepted.json()["data"]
    return {
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
        "user_id": data["user"]["id"],
    }


@pytest.fixture()
def member_auth(client, api_mailer, owner_auth) -> dict:
    return _join(client, api_mailer, owner_auth, "member@example.com")


@pytest.fixture()
def group_id(client, owner_auth, member_auth) -> str:
    created = client.post("/v1/groups/", json={"name": "General"}, headers=owner_auth["headers"])
    assert created.status_code == 201, created.text
    gid = created.json()["data"]["id"]
    added = client.post(
        f"/v1/groups/{gid}/members",
        json={"user_id": member_auth["user_id"]},
        headers=owner_auth["headers"],
    )
    assert added.status_code == 201, added.text
    return gid


def test_post_likes_and_comments(client, owner_auth, member_auth, group_id):
    base = f"/v1/groups/{group_id}/activity"
    created = client.post(f"{base}/", json={"content": "Hello team"}, headers=owner_auth["headers"])
    assert created.status_code == 201, created.text
    post_id = created.json()["data"]["id"]

    for headers in (owner_auth["headers"], member_auth["headers"], member_auth["headers"]):
        liked = client.post(f"{base}/{post_id}/like", headers=headers)
        assert liked.status_code == 200
    assert liked.json()["data"] == {"post_id": post_id, "liked": True, "like_count": 2}

    unliked = client.delete(f"{base}/{post_id}/like", headers=member_auth["headers"])
    assert unliked.json()["data"]["like_count"] == 1
    count = client.get(f"{base}/{post_id}/like-count", headers=owner_auth["headers"])
    assert count.json()["data"] == {"count": 1}

    comment = client.post(
        f"{base}/{post_id}/comments", json={"content": "Hi!"}, headers=member_auth["headers"]
    )
    assert comment.status_code == 201
    comment_id = comment.json()["data"]["id"]

    forbidden = client.delete(
        f"{base}/{post_id}/comments/{comment_id}", headers=owner_auth["headers"]
    )
    assert forbidden.status_code == 403

    feed = client.get(f"{base}/", headers=member_auth["headers"]).json()["data"]
    assert len(feed) == 1
    assert feed[0]["like_count"] == 1
    assert feed[0]["comment_count"] == 1
    assert feed[0]["liked_by_me"] is False


def test_only_author_edits_post(client, owner_auth, member_auth, group_id):
    base = f"/v1/groups/{group_id}/activity"
    post_id = client.post(
        f"{base}/", json={"content": "Draft"}, headers=owner_auth["headers"]
    ).json()["data"]["id"]

    denied = client.put(f"{base}/{post_id}", json={"content": "Mine now"}, headers=member_auth["headers"])
    assert denied.status_code == 403

    edited = client.put(f"{base}/{post_id}", json={"content": "Final"}, headers=owner_auth["headers"])
    assert edited.json()["data"]["content"] == "Final"

    assert client.delete(f"{base}/{post_id}", headers=owner_auth["headers"]).status_code == 200
    assert client.get(f"{base}/{post_id}", headers=owner_auth["headers"]).status_code == 404


def test_lounge_story_permissions(client, api_mailer, owner_auth, member_auth):
    created = client.post(
        "/v1/lounges/",
        json={"title": "Offsite", "type": "event", "location": "Busan"},
        headers=owner_auth["headers"],
    )
    assert created.status_code == 201, created.text
    story = created.json()["data"]
    assert story["workplace_id"] == owner_auth["workplace_id"]

    listed = client.get("/v1/lounges/", headers=member_auth["headers"]).json()["data"]
    assert [s["title"] for s in listed] == ["Offsite"]

    denied = client.put(
        f"/v1/lounges/{story['id']}", json={"title": "Hijacked"}, headers=member_auth["headers"]
    )
    assert denied.status_code == 403

    member_story = client.post(
        "/v1/lounges/", json={"title": "Lunch", "type": "news"}, headers=member_auth["headers"]
    ).json()["data"]
    removed = client.delete(f"/v1/lounges/{member_story['id']}", headers=owner_auth["headers"])
    assert removed.status_code == 200
    assert client.get(f"/v1/lounges/{member_story['id']}", headers=owner_auth["headers"]).status_code == 404


def test_lounge_is_scoped_to_current_workplace(client, api_mailer, owner_auth):
    story = client.post(
        "/v1/lounges/", json={"title": "Secret", "type": "update"}, headers=owner_auth["headers"]
    ).json()["data"]
    other = onboard(client, api_mailer, "other@example.com", "Other Co", "Otto")

    assert client.get("/v1/lounges/", headers=other["headers"]).json()["data"] == []
    assert client.get(f"/v1/lounges/{story['id']}", headers=other["headers"]).status_code == 404
