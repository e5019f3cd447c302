import pytest

from conftest import TEST_PASSWORD


@pytest.mark.asyncio
async def test_register_then_login_with_json(anon_client):
    resp = await anon_client.post(
        "/v1/auth/register",
        json={
            "email": "new@example.com",
            "password": "s3cret!",
            "name": "New Learner",
            "educationLevel": "college",
        },
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["email"] == "new@example.com"
    assert body["educationLevel"] == "college"

    resp = await anon_client.post(
        "/v1/auth/login", json={"email": "new@example.com", "password": "s3cret!"}
    )
    assert resp.status_code == 200, resp.text
    login = resp.json()
    assert login["tokenType"] == "bearer"
    assert login["user"]["name"] == "New Learner"

    resp = await anon_client.get(
        "/v1/auth/profile",
        headers={"Authorization": f"Bearer {login['accessToken']}"},
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "new@example.com"


@pytest.mark.asyncio
async def test_short_passwords_are_rejected(anon_client):
    resp = await anon_client.post(
        "/v1/auth/register", json={"email": "short@example.com", "password": "abc"}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_wrong_password_is_unauthorised(anon_client, user):
    resp = await anon_client.post(
        "/v1/auth/login", json={"email": user.email, "password": "not-" + TEST_PASSWORD}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_form_login_issues_a_bearer_token(anon_client, user):
    resp = await anon_client.post(
        "/v1/auth/jwt/login",
        data={"username": user.email, "password": TEST_PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    token = resp.json()["access_token"]

    resp = await anon_client.get(
        "/v1/user/profile", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == str(user.id)


@pytest.mark.asyncio
async def test_protected_routes_need_a_token(anon_client):
    resp = await anon_client.get("/v1/flashcards")
    assert resp.status_code == 401

    resp = await anon_client.get(
        "/v1/flashcards", headers={"Authorization": "Bearer not-a-token"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_jwks_publishes_the_signing_key(anon_client):
    resp = await anon_client.get("/v1/auth/.well-known/jwks.json")
    assert resp.status_code == 200
    (key,) = resp.json()["keys"]
    assert key["kty"] == "RSA"
    assert key["kid"] == "v1"


@pytest.mark.asyncio
async def test_health_reports_the_provider(anon_client):
    resp = await anon_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
