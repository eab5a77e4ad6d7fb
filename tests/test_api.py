"""API endpoint tests."""

from datetime import UTC, datetime, timedelta

from crud_oauth.services.tokens import TokenService

TEST_JWT_SECRET = "test-jwt-secret"  # noqa: S105

MISSING_ID = "0123456789abcdef01234567"


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_banner(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "timestamp" in response.json()


def test_register_and_login_scenario(client):
    """Register, log in case-insensitively, reject bad credentials."""
    response = client.post(
        "/registro",
        json={"name": "Ana Lopez", "email": "Ana@Test.com", "password": "secret123"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Usuario registrado exitosamente"
    assert body["user"]["email"] == "ana@test.com"
    assert body["user"]["authMode"] == "local"

    response = client.post("/login", json={"email": "ANA@TEST.COM", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["token"]
    assert TokenService(TEST_JWT_SECRET).verify(token).email == "ana@test.com"

    response = client.post("/login", json={"email": "ana@test.com", "password": "wrongpass1"})
    assert response.status_code == 401
    assert response.json() == {"error": "Correo o contraseña incorrectos"}

    assert client.get("/usuarios").status_code == 401

    response = client.delete(f"/usuarios/{MISSING_ID}", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404


def test_register_response_hides_password(client):
    response = client.post(
        "/registro",
        json={"name": "Ana Lopez", "email": "ana@test.com", "password": "secret123"},
    )
    user = response.json()["user"]
    assert set(user) == {"id", "name", "email", "avatarUrl", "authMode", "createdAt"}


def test_register_duplicate_email(client, auth_headers):
    """Test registration with duplicate email fails."""
    response = client.post(
        "/registro",
        json={"name": "Duplicate", "email": auth_headers.email.upper(), "password": "password123"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "El correo ya está registrado"}


def test_register_missing_fields(client):
    response = client.post("/registro", json={"name": "Ana", "email": "ana@test.com"})
    assert response.status_code == 400
    assert response.json() == {"error": "Todos los campos son requeridos"}


def test_register_validation_message(client):
    response = client.post(
        "/registro", json={"name": "Ana", "email": "ana@test.com", "password": "short"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "La contraseña debe tener al menos 8 caracteres"}


def test_register_rejects_oversized_password(client):
    response = client.post(
        "/registro", json={"name": "Ana", "email": "ana@test.com", "password": "x" * 5000}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "La contraseña no puede tener más de 128 caracteres"}


def test_update_rejects_oversized_password(client, auth_headers):
    response = client.put(
        f"/usuarios/{auth_headers.user_id}", headers=auth_headers, json={"password": "x" * 5000}
    )
    assert response.status_code == 400


def test_register_rejects_non_object_body(client):
    response = client.post("/registro", json=["not", "an", "object"])
    assert response.status_code == 400
    assert "error" in response.json()


def test_login_missing_fields(client):
    response = client.post("/login", json={"email": "ana@test.com"})
    assert response.status_code == 400
    assert response.json() == {"error": "Correo y contraseña son requeridos"}


def test_login_unknown_email(client):
    response = client.post("/login", json={"email": "nobody@test.com", "password": "secret123"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_profile(client, auth_headers):
    response = client.get("/perfil", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["user"]["id"] == auth_headers.user_id


def test_profile_of_deleted_user(client, auth_headers):
    client.delete(f"/usuarios/{auth_headers.user_id}", headers=auth_headers)
    response = client.get("/perfil", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Usuario no encontrado"}


def test_missing_token_message(client):
    response = client.get("/perfil")
    assert response.status_code == 401
    assert response.json() == {"error": "Token no proporcionado. Usa: Authorization: Bearer <token>"}


def test_expired_token_message(client, auth_headers):
    token = TokenService(TEST_JWT_SECRET).issue(
        auth_headers.user_id, auth_headers.email, now=datetime.now(UTC) - timedelta(days=8)
    )
    response = client.get("/usuarios", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Token expirado"}


def test_invalid_token_message(client):
    response = client.get("/usuarios", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json() == {"error": "Token inválido"}


def test_list_users(client, auth_headers):
    client.post(
        "/usuarios",
        headers=auth_headers,
        json={"name": "Luis", "email": "luis@test.com", "password": "password123"},
    )
    response = client.get("/usuarios", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert len(data["users"]) == 2
    for user in data["users"]:
        assert "passwordHash" not in user
        assert "password_hash" not in user


def test_create_user(client, auth_headers):
    response = client.post(
        "/usuarios",
        headers=auth_headers,
        json={"name": "Luis", "email": "Luis@Test.com", "password": "password123"},
    )
    assert response.status_code == 201
    assert response.json()["message"] == "Usuario creado exitosamente"
    assert response.json()["user"]["email"] == "luis@test.com"

    login = client.post("/login", json={"email": "luis@test.com", "password": "password123"})
    assert login.status_code == 200


def test_create_user_requires_token(client):
    response = client.post(
        "/usuarios", json={"name": "Luis", "email": "luis@test.com", "password": "password123"}
    )
    assert response.status_code == 401


def test_get_user(client, auth_headers):
    response = client.get(f"/usuarios/{auth_headers.user_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["user"]["email"] == auth_headers.email


def test_get_user_malformed_id(client, auth_headers):
    response = client.get("/usuarios/123", headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "ID inválido"}


def test_get_missing_user(client, auth_headers):
    response = client.get(f"/usuarios/{MISSING_ID}", headers=auth_headers)
    assert response.status_code == 404


def test_update_user(client, auth_headers):
    response = client.put(
        f"/usuarios/{auth_headers.user_id}",
        headers=auth_headers,
        json={"name": "Renamed User", "password": "newpassword1"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Renamed User"
    assert response.json()["user"]["email"] == auth_headers.email

    old = client.post("/login", json={"email": auth_headers.email, "password": "testpass123"})
    assert old.status_code == 401
    new = client.post("/login", json={"email": auth_headers.email, "password": "newpassword1"})
    assert new.status_code == 200


def test_update_user_duplicate_email(client, auth_headers):
    client.post(
        "/usuarios",
        headers=auth_headers,
        json={"name": "Luis", "email": "luis@test.com", "password": "password123"},
    )
    response = client.put(
        f"/usuarios/{auth_headers.user_id}", headers=auth_headers, json={"email": "LUIS@test.com"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "El correo ya está registrado"}


def test_update_user_invalid_fields(client, auth_headers):
    response = client.put(
        f"/usuarios/{auth_headers.user_id}", headers=auth_headers, json={"password": "short"}
    )
    assert response.status_code == 400

    response = client.put(f"/usuarios/{MISSING_ID}", headers=auth_headers, json={"name": "Nadie"})
    assert response.status_code == 404

    response = client.put("/usuarios/not-an-id", headers=auth_headers, json={"name": "Nadie"})
    assert response.status_code == 400


def test_delete_user(client, auth_headers):
    created = client.post(
        "/usuarios",
        headers=auth_headers,
        json={"name": "Luis", "email": "luis@test.com", "password": "password123"},
    ).json()["user"]

    response = client.delete(f"/usuarios/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Usuario eliminado exitosamente"
    assert response.json()["user"]["email"] == "luis@test.com"

    assert client.get(f"/usuarios/{created['id']}", headers=auth_headers).status_code == 404


def test_delete_malformed_id(client, auth_headers):
    response = client.delete("/usuarios/xyz", headers=auth_headers)
    assert response.status_code == 400


def test_logout_without_session(client):
    response = client.get("/logout")
    assert response.status_code == 200
    assert response.json() == {"message": "Sesión cerrada exitosamente"}


def test_unknown_route_uses_error_body(client):
    response = client.get("/no-such-route")
    assert response.status_code == 404
    assert "error" in response.json()
