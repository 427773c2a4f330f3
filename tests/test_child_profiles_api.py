from minimind.db.models import ChildProfile
from tests.conftest import auth_headers

URL = "/api/v1/child-profiles"


def test_requires_auth(client):
    assert client.get(URL).status_code == 401


def test_create_and_list(client, free_user):
    headers = auth_headers(free_user)
    response = client.post(URL, json={"name": "  Ada ", "age": 6, "favorites": {"color": "blue"}}, headers=headers)
    assert response.status_code == 200
    profile = response.json()["profile"]
    assert profile["name"] == "Ada"
    assert profile["favorites"] == {"color": "blue"}

    listed = client.get(URL, headers=headers).json()["profiles"]
    assert [p["id"] for p in listed] == [profile["id"]]


def test_free_user_limited_to_one(client, free_user):
    headers = auth_headers(free_user)
    assert client.post(URL, json={"name": "Ada"}, headers=headers).status_code == 200
    response = client.post(URL, json={"name": "Bo"}, headers=headers)
    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["upgradeRequired"] is True
    assert detail["code"] == "UPGRADE_REQUIRED"
    assert "5 child profiles" in detail["error"]


def test_plus_user_limited_to_five(client, plus_user):
    headers = auth_headers(plus_user)
    for i in range(5):
        assert client.post(URL, json={"name": f"Kid {i}"}, headers=headers).status_code == 200
    response = client.post(URL, json={"name": "Kid 6"}, headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "Maximum child profiles reached for your plan."


def test_blank_name_rejected(client, free_user):
    response = client.post(URL, json={"name": "   "}, headers=auth_headers(free_user))
    assert response.status_code == 422


def test_update(client, db, free_user):
    headers = auth_headers(free_user)
    child_id = client.post(URL, json={"name": "Ada", "age": 5}, headers=headers).json()["profile"]["id"]
    response = client.put(f"{URL}/{child_id}", json={"name": "Ada Mae", "age": 6}, headers=headers)
    assert response.status_code == 200
    assert response.json()["profile"]["name"] == "Ada Mae"
    assert response.json()["profile"]["age"] == 6


def test_other_users_profile_is_not_found(client, free_user, make_user):
    owner_headers = auth_headers(free_user)
    child_id = client.post(URL, json={"name": "Ada"}, headers=owner_headers).json()["profile"]["id"]
    stranger = auth_headers(make_user("stranger@example.com"))

    assert client.put(f"{URL}/{child_id}", json={"name": "Mine"}, headers=stranger).status_code == 404
    assert client.delete(f"{URL}/{child_id}", headers=stranger).status_code == 404
    assert client.get(URL, headers=stranger).json()["profiles"] == []


def test_delete(client, db, free_user):
    headers = auth_headers(free_user)
    child_id = client.post(URL, json={"name": "Ada"}, headers=headers).json()["profile"]["id"]
    response = client.delete(f"{URL}/{child_id}", headers=headers)
    assert response.json() == {"success": True}
    assert db.query(ChildProfile).count() == 0
    # Slot is free again
    assert client.post(URL, json={"name": "Bo"}, headers=headers).status_code == 200
