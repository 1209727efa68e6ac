"""
Tests for the admin endpoints and the bearer credential gate.
"""
import jwt
from fastapi import status

from key_manager.core.database import Base


def register_user(client, first, last, email):
    response = client.post("/user/register", json={"firstName": first, "lastName": last, "email": email})
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["apiKey"]


def test_admin_register(client):
    response = client.post("/admin/register", json={"email": "ops@example.com", "password": "pw-123456"})

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["email"] == "ops@example.com"
    assert "message" in data


def test_admin_register_duplicate_returns_409(client):
    body = {"email": "ops@example.com", "password": "pw-123456"}
    client.post("/admin/register", json=body)

    response = client.post("/admin/register", json=body)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"] == "DuplicateEmail"


def test_admin_register_missing_password_returns_400(client):
    response = client.post("/admin/register", json={"email": "ops@example.com"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "ValidationError"


def test_admin_login_returns_credential(client, admin_credential):
    response = client.post("/admin/login", json={"email": "ops@example.com", "password": "correct-horse"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["credential"] == data["token"]
    assert data["tokenType"] == "bearer"
    assert data["expiresIn"] == 3600


def test_admin_login_failures_are_indistinguishable(client, admin_credential):
    wrong_password = client.post("/admin/login", json={"email": "ops@example.com", "password": "nope"})
    unknown_email = client.post("/admin/login", json={"email": "ghost@example.com", "password": "correct-horse"})

    assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
    assert unknown_email.status_code == status.HTTP_401_UNAUTHORIZED
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["message"] == "Invalid credentials."


def test_admin_login_missing_password_returns_400(client, admin_credential):
    response = client.post("/admin/login", json={"email": "ops@example.com"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "ValidationError"


def test_list_users_without_header_returns_401(client):
    response = client.get("/admin/users")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "MissingCredential"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_list_users_with_non_bearer_scheme_returns_401(client, admin_credential):
    response = client.get("/admin/users", headers={"Authorization": f"Basic {admin_credential}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_list_users_with_tampered_credential_returns_401(client, context, admin_credential):
    claims = jwt.decode(
        admin_credential,
        context.signing_secret,
        algorithms=["HS256"],
        options={"verify_exp": False, "verify_iat": False},
    )
    claims["id"] = 999
    forged = jwt.encode(claims, "attacker-secret-attacker-secret-0000", algorithm="HS256")

    response = client.get("/admin/users", headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "InvalidCredential"


def test_list_users_with_expired_credential_returns_401(client, clock, admin_credential):
    clock.advance(hours=1, seconds=1)

    response = client.get("/admin/users", headers={"Authorization": f"Bearer {admin_credential}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "InvalidCredential"


def test_list_users_with_valid_credential(client, admin_credential):
    ada_key = register_user(client, "Ada", "Lovelace", "ada@example.com")
    grace_key = register_user(client, "Grace", "Hopper", "grace@example.com")

    response = client.get("/admin/users", headers={"Authorization": f"Bearer {admin_credential}"})

    assert response.status_code == status.HTTP_200_OK
    rows = response.json()
    assert len(rows) == 2
    assert rows[0]["firstName"] == "Ada"
    assert rows[0]["lastName"] == "Lovelace"
    assert rows[0]["email"] == "ada@example.com"
    assert rows[0]["keyToken"] == ada_key
    assert rows[0]["status"] == "Active"
    assert rows[0]["start"].startswith("2026-01-15T12:00:00")
    assert rows[0]["expiry"].startswith("2026-02-14T12:00:00")
    assert rows[1]["keyToken"] == grace_key
    assert {"userId", "firstName", "lastName", "email", "keyToken", "start", "expiry", "status"} == set(rows[0])


def test_list_users_storage_failure_returns_500(client, admin_credential, context):
    Base.metadata.drop_all(context.engine)

    response = client.get("/admin/users", headers={"Authorization": f"Bearer {admin_credential}"})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["error"] == "StorageError"
