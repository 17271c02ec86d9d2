from datetime import timedelta

from backoffice.core.security import create_access_token


def test_login_returns_token_and_user(client, user_factory):
    user = user_factory(role="operator", username="Maria")

    response = client.post("/auth/login", json={"username": "maria", "password": user["password"]})

    assert response.status_code == 200
    body = response.json()
    assert body["token"]["token_type"] == "bearer"
    assert body["user"]["username"] == "maria"
    assert body["user"]["role"] == "operator"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "maria"


def test_login_with_wrong_password(client, user_factory):
    user_factory(username="maria")
    response = client.post("/auth/login", json={"username": "maria", "password": "wrong-password"})
    assert response.status_code == 401


def test_inactive_user_cannot_login(client, user_factory):
    user = user_factory(username="ghost", is_active=False)
    response = client.post("/auth/login", json={"username": "ghost", "password": user["password"]})
    assert response.status_code == 401


def test_expired_token_is_rejected(client, user_factory):
    user = user_factory()
    token = create_access_token({"sub": user["username"]}, expires_delta=timedelta(minutes=-1))
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_for_unknown_user_is_rejected(client):
    token = create_access_token({"sub": "nobody"})
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_health_needs_no_token(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
