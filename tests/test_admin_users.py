def test_admin_can_create_update_and_delete_users(client, user_factory):
    admin = user_factory(role="admin")
    admin_headers = admin["headers"]

    create_response = client.post(
        "/admin/users",
        headers=admin_headers,
        json={"username": "Operador1", "password": "InitialPass123!", "role": "operator"},
    )
    assert create_response.status_code == 201
    managed_user = create_response.json()
    assert managed_user["username"] == "operador1"
    assert managed_user["role"] == "operator"
    assert managed_user["is_active"] is True

    detail = client.get(f"/admin/users/{managed_user['id']}", headers=admin_headers)
    assert detail.status_code == 200

    update_response = client.patch(
        f"/admin/users/{managed_user['id']}",
        headers=admin_headers,
        json={"password": "UpdatedPass123!", "role": "admin"},
    )
    assert update_response.status_code == 200
    assert update_response.json()["role"] == "admin"

    login_response = client.post(
        "/auth/login", json={"username": "operador1", "password": "UpdatedPass123!"}
    )
    assert login_response.status_code == 200

    delete_response = client.delete(f"/admin/users/{managed_user['id']}", headers=admin_headers)
    assert delete_response.status_code == 204
    assert client.get(f"/admin/users/{managed_user['id']}", headers=admin_headers).status_code == 404


def test_duplicate_username_is_409(client, user_factory):
    admin = user_factory(role="admin")
    user_factory(username="taken")
    response = client.post(
        "/admin/users",
        headers=admin["headers"],
        json={"username": "TAKEN", "password": "Password123!"},
    )
    assert response.status_code == 409


def test_short_password_is_400(client, user_factory):
    admin = user_factory(role="admin")
    response = client.post(
        "/admin/users",
        headers=admin["headers"],
        json={"username": "shorty", "password": "123"},
    )
    assert response.status_code == 400


def test_list_users_paginates_and_searches(client, user_factory):
    admin = user_factory(role="admin", username="boss")
    for index in range(3):
        user_factory(username=f"cajero{index}")

    response = client.get("/admin/users", headers=admin["headers"], params={"limit": 500})
    assert response.status_code == 200
    body = response.json()
    assert body["meta"] == {"total": 4, "page": 1, "limit": 100}

    response = client.get("/admin/users", headers=admin["headers"], params={"search": "cajero", "limit": 2})
    body = response.json()
    assert body["meta"]["total"] == 3
    assert len(body["data"]) == 2
    assert "hashed_password" not in body["data"][0]


def test_admin_cannot_delete_or_demote_themselves(client, user_factory):
    admin = user_factory(role="admin")
    admin_id = admin["user"].id

    response = client.delete(f"/admin/users/{admin_id}", headers=admin["headers"])
    assert response.status_code == 400

    response = client.patch(f"/admin/users/{admin_id}", headers=admin["headers"], json={"role": "operator"})
    assert response.status_code == 400


def test_operator_cannot_manage_users(client, user_factory):
    operator = user_factory(role="operator")
    response = client.get("/admin/users", headers=operator["headers"])
    assert response.status_code == 403


def test_deactivated_user_token_stops_working(client, user_factory):
    admin = user_factory(role="admin")
    operator = user_factory(role="operator")

    response = client.patch(
        f"/admin/users/{operator['user'].id}", headers=admin["headers"], json={"is_active": False}
    )
    assert response.status_code == 200

    assert client.get("/auth/me", headers=operator["headers"]).status_code == 401
