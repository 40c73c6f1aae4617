"""Integration tests for authentication endpoints."""
from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from coach_notify.core.security import decode_token


def test_coach_registration_success(client: TestClient) -> None:
    payload = {
        "email": "coach@example.com",
        "password": "securepassword",
        "full_name": "Sam Strong",
        "role": "coach",
    }

    response = client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert uuid.UUID(data["id"])
    assert data["email"] == payload["email"]
    assert data["role"] == "coach"
    assert data["is_active"] is True


def test_registration_defaults_to_client(client: TestClient) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "client@example.com", "password": "securepassword"},
    )

    assert response.status_code == 201
    assert response.json()["role"] == "client"


def test_registration_duplicate_email(client: TestClient) -> None:
    payload = {"email": "duplicate@example.com", "password": "anothersecurepassword"}

    first_response = client.post("/api/v1/auth/register", json=payload)
    assert first_response.status_code == 201

    duplicate_response = client.post("/api/v1/auth/register", json=payload)
    assert duplicate_response.status_code == 400
    assert duplicate_response.json()["detail"] == "A user with this email already exists."


def test_login_returns_tokens_with_role_claim(client: TestClient) -> None:
    client.post(
        "/api/v1/auth/register",
        json={"email": "login@example.com", "password": "supersecure", "role": "coach"},
    )

    response = client.post(
        "/api/v1/auth/login", json={"email": "login@example.com", "password": "supersecure"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    claims = decode_token(data["access_token"])
    assert claims["type"] == "access"
    assert claims["role"] == "coach"
    assert decode_token(data["refresh_token"])["type"] == "refresh"


def test_login_invalid_credentials(client: TestClient) -> None:
    response = client.post(
        "/api/v1/auth/login", json={"email": "unknown@example.com", "password": "wrongpassword"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password"


def test_refresh_token_is_rejected_for_api_calls(client: TestClient) -> None:
    client.post(
        "/api/v1/auth/register", json={"email": "refresh@example.com", "password": "supersecure"}
    )
    tokens = client.post(
        "/api/v1/auth/login", json={"email": "refresh@example.com", "password": "supersecure"}
    ).json()

    response = client.get(
        "/api/v1/group-chats/notifications",
        headers={"Authorization": f"Bearer {tokens['refresh_token']}"},
    )

    assert response.status_code == 401
