from datetime import timedelta

from sketchtunes.services.jwt_service import create_access_token, verify_token


def test_login_returns_token_for_valid_credentials(client, user):
    response = client.post("/api/v1/auth/login", json={"email": user["email"], "password": "password123"})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert verify_token(body["access_token"]) == user["id"]


def test_login_rejects_wrong_password(client, user):
    response = client.post("/api/v1/auth/login", json={"email": user["email"], "password": "wrong-password"})
    assert response.status_code == 401


def test_login_rejects_unknown_email(client):
    response = client.post("/api/v1/auth/login", json={"email": "ghost@example.com", "password": "password123"})
    assert response.status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code in (401, 403)


def test_me_returns_profile(client, user, auth_headers):
    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == user["email"]
    assert "hashed_password" not in response.json()


def test_expired_token_is_rejected(client, user):
    token = create_access_token(user["id"], expires_delta=timedelta(seconds=-1))
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_for_deleted_user(client, supabase, user, auth_headers):
    del supabase.users[user["id"]]
    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 404


def test_logout(client, auth_headers):
    response = client.post("/api/v1/auth/logout", headers=auth_headers)
    assert response.json() == {"message": "Logged out successfully"}
