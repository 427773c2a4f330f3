from minimind.config import get_settings


def test_health_reports_configuration(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["environment_variables"]["OPENAI_API_KEY"] is True
    assert body["environment_variables"]["STRIPE_SECRET_KEY"] is True
    assert "sk-test" not in response.text


def test_health_lists_missing(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "openai_api_key", "")
    body = client.get("/api/v1/health").json()
    assert body["status"] == "missing_env_vars"
    assert "OPENAI_API_KEY" in body["missing_variables"]
