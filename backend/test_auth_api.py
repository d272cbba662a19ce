from watchd.services.user_service import GUEST_ADJECTIVES, GUEST_ANIMALS


def _register(client, email="ana@example.com", password="secret-pass", name="Ana"):
    return client.post("/auth/register", json={"name": name, "email": email, "password": password})


def _headers(body):
    return {"Authorization": f"Bearer {body['access_token']}"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_register_returns_token_and_user(client):
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["name"] == "Ana"
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["is_guest"] is False


def test_register_duplicate_email_conflicts(client):
    _register(client)
    response = _register(client, email="ANA@example.com")

    assert response.status_code == 409


def test_register_validation(client):
    assert _register(client, password="short").status_code == 422
    assert _register(client, email="not-an-email").status_code == 422
    assert _register(client, name="").status_code == 422


def test_login(client):
    _register(client)

    ok = client.post("/auth/login", json={"email": "ana@example.com", "password": "secret-pass"})
    wrong = client.post("/auth/login", json={"email": "ana@example.com", "password": "wrong-pass"})
    unknown = client.post("/auth/login", json={"email": "bob@example.com", "password": "secret-pass"})

    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "ana@example.com"
    assert wrong.status_code == 401
    assert unknown.status_code == 401


def test_guest_gets_generated_name(client):
    response = client.post("/auth/guest")

    assert response.status_code == 201
    user = response.json()["user"]
    adjective, animal = user["name"].split(" ")
    assert adjective in GUEST_ADJECTIVES
    assert animal in GUEST_ANIMALS
    assert user["is_guest"] is True
    assert user["email"] is None


def test_guest_can_pick_a_name(client):
    response = client.post("/auth/guest", json={"name": "Couch Potato"})
    assert response.json()["user"]["name"] == "Couch Potato"


def test_guest_upgrade_then_login(client):
    guest = client.post("/auth/guest").json()

    response = client.post(
        "/auth/upgrade",
        json={"email": "guest@example.com", "password": "secret-pass", "name": "Cleo"},
        headers=_headers(guest),
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == guest["user"]["id"]
    assert user["is_guest"] is False
    assert user["name"] == "Cleo"
    login = client.post("/auth/login", json={"email": "guest@example.com", "password": "secret-pass"})
    assert login.status_code == 200


def test_only_guests_can_upgrade(client):
    registered = _register(client).json()

    response = client.post(
        "/auth/upgrade",
        json={"email": "other@example.com", "password": "secret-pass"},
        headers=_headers(registered),
    )

    assert response.status_code == 400


def test_upgrade_to_taken_email_conflicts(client):
    _register(client)
    guest = client.post("/auth/guest").json()

    response = client.post(
        "/auth/upgrade",
        json={"email": "ana@example.com", "password": "secret-pass"},
        headers=_headers(guest),
    )

    assert response.status_code == 409


def test_me_requires_token(client):
    assert client.get("/users/me").status_code == 401
    assert client.get("/users/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_update_display_name(client):
    body = _register(client).json()

    response = client.patch("/users/me", json={"name": "  Ana Maria "}, headers=_headers(body))

    assert response.status_code == 200
    assert response.json()["name"] == "Ana Maria"
    assert client.get("/users/me", headers=_headers(body)).json()["name"] == "Ana Maria"
