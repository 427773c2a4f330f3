from minimind.core.security import create_refresh_token
from tests.conftest import auth_headers

API = "/api/v1"


def _register(client, email="parent@example.com", password="password123"):
    return client.post(f"{API}/auth/register", json={"email": email, "password": password, "name": "Pat"})


def test_register_creates_free_profile(client):
    response = _register(client)
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "parent@example.com"
    assert body["profile"] == {"plan": "free", "stripeCustomerId": None}
    assert body["tokens"]["accessToken"]
    assert body["tokens"]["tokenType"] == "bearer"


def test_register_duplicate_email(client):
    _register(client)
    response = _register(client, email="PARENT@example.com")
    assert response.status_code == 400


def test_register_short_password(client):
    assert _register(client, password="short").status_code == 422


def test_login(client):
    _register(client)
    ok = client.post(f"{API}/auth/login", json={"email": "parent@example.com", "password": "password123"})
    assert ok.status_code == 200
    bad = client.post(f"{API}/auth/login", json={"email": "parent@example.com", "password": "wrong-password"})
    assert bad.status_code == 401


def test_refresh(client):
    tokens = _register(client).json()["tokens"]
    response = client.post(f"{API}/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 200
    assert response.json()["accessToken"]


def test_access_token_cannot_refresh(client):
    tokens = _register(client).json()["tokens"]
    response = client.post(f"{API}/auth/refresh", json={"refreshToken": tokens["accessToken"]})
    assert response.status_code == 401


def test_refresh_token_is_not_an_access_token(client, free_user):
    headers = {"Authorization": f"Bearer {create_refresh_token(str(free_user.id))}"}
    assert client.get(f"{API}/me", headers=headers).status_code == 401


def test_me(client, free_user):
    response = client.get(f"{API}/me", headers=auth_headers(free_user))
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "free@example.com"
    assert body["plan"] == "free"
    assert body["planName"] == "MiniMind Free"
    assert body["features"]["save_and_replay"] is False


def test_update_me(client, free_user):
    response = client.patch(f"{API}/me", json={"name": "New Name"}, headers=auth_headers(free_user))
    assert response.json()["user"]["name"] == "New Name"


def test_usage(client, free_user):
    response = client.get(f"{API}/usage", headers=auth_headers(free_user))
    assert response.status_code == 200
    assert response.json() == {
        "plan": "free",
        "dailyUsage": 0,
        "dailyLimit": 5,
        "remaining": 5,
        "canChat": True,
        "features": {
            "bedtime_mode": False,
            "learning_mode": False,
            "save_and_replay": False,
            "parent_dashboard": False,
            "story_personalization": False,
        },
    }
