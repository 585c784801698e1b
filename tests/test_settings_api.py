import pytest
from httpx import AsyncClient

from multiprompt.core.config import settings
from multiprompt.core.security import create_session_token, hash_password
from multiprompt.fanout.adapters import default_model_for
from multiprompt.fanout.types import Provider
from multiprompt.models.user import User


@pytest.mark.asyncio
async def test_settings_requires_session(client: AsyncClient):
    assert (await client.get("/api/settings")).status_code == 401
    assert (await client.post("/api/settings", json={})).status_code == 401


@pytest.mark.asyncio
async def test_settings_default(client: AsyncClient, auth_headers):
    response = await client.get("/api/settings", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"openai", "anthropic", "gemini"}
    for provider in Provider:
        assert data[provider.value] == {"hasKey": False, "model": default_model_for(provider)}


@pytest.mark.asyncio
async def test_set_key_is_write_only(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/settings",
        json={"openai": {"apiKey": "sk-very-secret", "model": "gpt-4o"}},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["openai"] == {"hasKey": True, "model": "gpt-4o"}
    assert "sk-very-secret" not in response.text

    response = await client.get("/api/settings", headers=auth_headers)
    assert response.json()["openai"]["hasKey"] is True
    assert response.json()["anthropic"]["hasKey"] is False
    assert "sk-very-secret" not in response.text


@pytest.mark.asyncio
async def test_omitted_fields_untouched(client: AsyncClient, auth_headers):
    await client.post(
        "/api/settings",
        json={"gemini": {"apiKey": "g-key", "model": "gemini-1.5-flash"}},
        headers=auth_headers,
    )
    response = await client.post("/api/settings", json={"gemini": {"model": "gemini-2.0"}}, headers=auth_headers)

    assert response.json()["gemini"] == {"hasKey": True, "model": "gemini-2.0"}


@pytest.mark.asyncio
async def test_clear_key(client: AsyncClient, auth_headers):
    await client.post("/api/settings", json={"anthropic": {"apiKey": "sk-ant"}}, headers=auth_headers)

    response = await client.post("/api/settings", json={"anthropic": {"apiKey": ""}}, headers=auth_headers)
    assert response.json()["anthropic"]["hasKey"] is False

    await client.post("/api/settings", json={"anthropic": {"apiKey": "sk-ant"}}, headers=auth_headers)
    response = await client.post("/api/settings", json={"anthropic": {"apiKey": None}}, headers=auth_headers)
    assert response.json()["anthropic"]["hasKey"] is False


@pytest.mark.asyncio
async def test_clear_model_reverts_to_default(client: AsyncClient, auth_headers):
    await client.post("/api/settings", json={"openai": {"model": "gpt-4o"}}, headers=auth_headers)
    response = await client.post("/api/settings", json={"openai": {"model": ""}}, headers=auth_headers)
    assert response.json()["openai"]["model"] == default_model_for(Provider.OPENAI)


@pytest.mark.asyncio
async def test_env_fallback_reported(client: AsyncClient, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "anthropic_api_key_1", "sk-env")
    monkeypatch.setattr(settings, "anthropic_model_1", "claude-env")

    response = await client.get("/api/settings", headers=auth_headers)

    assert response.json()["anthropic"] == {"hasKey": True, "model": "claude-env"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"mistral": {"apiKey": "x"}},
        {"openai": {"secret": "x"}},
        {"openai": "sk-plain-string"},
    ],
)
async def test_invalid_update_rejected(client: AsyncClient, auth_headers, body):
    response = await client.post("/api/settings", json=body, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_settings_are_per_user(client: AsyncClient, auth_headers, db):
    await client.post("/api/settings", json={"openai": {"apiKey": "sk-alice"}}, headers=auth_headers)

    bob = User(username="bob", password_hash=hash_password("bobpassword"))
    db.add(bob)
    await db.commit()
    bob_headers = {"Cookie": f"{settings.session_cookie_name}={create_session_token(bob.id)}"}

    response = await client.get("/api/settings", headers=bob_headers)
    assert response.json()["openai"]["hasKey"] is False


@pytest.mark.asyncio
async def test_saving_one_provider_leaves_others_on_env_model(client: AsyncClient, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "openai_model_1", "gpt-env-a")

    response = await client.post("/api/settings", json={"gemini": {"apiKey": "g-key"}}, headers=auth_headers)
    assert response.json()["openai"]["model"] == "gpt-env-a"

    # An env change after the save still takes effect for untouched providers
    monkeypatch.setattr(settings, "openai_model_1", "gpt-env-b")
    response = await client.get("/api/settings", headers=auth_headers)

    assert response.json()["openai"]["model"] == "gpt-env-b"
    assert response.json()["anthropic"]["model"] == default_model_for(Provider.ANTHROPIC)


@pytest.mark.asyncio
async def test_reset_model_returns_to_env_model(client: AsyncClient, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "anthropic_model_1", "claude-env")
    await client.post("/api/settings", json={"anthropic": {"model": "claude-mine"}}, headers=auth_headers)

    response = await client.post("/api/settings", json={"anthropic": {"model": ""}}, headers=auth_headers)

    assert response.json()["anthropic"]["model"] == "claude-env"
