"""Tests for authentication endpoints."""

import pytest
from sqlalchemy import select

from app.models.user import User
from app.services.auth import (
    create_token_for_user,
    decode_access_token,
    hash_password,
    verify_password,
)

REGISTRATION = {
    "first_name": "Jane",
    "last_name": "Doe",
    "email": "jane@example.com",
    "password": "testpass123",
    "phone": "555-0100",
}


def test_password_hashing():
    """Password hashing should be one-way and verifiable."""
    password = "supersecret123"
    hashed = hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed) is True
    assert verify_password("wrongpassword", hashed) is False


def test_token_round_trip_and_tampering():
    token = create_token_for_user(User(id=7, role="staff"))
    payload = decode_access_token(token)
    assert payload["sub"] == "7"
    assert payload["role"] == "staff"

    assert decode_access_token(token + "x") is None


@pytest.mark.asyncio
async def test_register_creates_patient(client, db):
    resp = await client.post("/api/auth/register", json=REGISTRATION)

    assert resp.status_code == 201
    data = resp.json()
    assert data["message"] == "User registered successfully!"

    result = await db.execute(select(User).where(User.email == "jane@example.com"))
    user = result.scalar_one()
    assert user.id == data["userId"]
    assert user.role == "user"
    assert user.hashed_password != "testpass123"


@pytest.mark.asyncio
async def test_register_duplicate_email_fails(client):
    resp1 = await client.post("/api/auth/register", json=REGISTRATION)
    assert resp1.status_code == 201

    resp2 = await client.post("/api/auth/register", json=REGISTRATION)
    assert resp2.status_code == 400
    assert resp2.json()["detail"] == "Failed! Email is already in use."


@pytest.mark.asyncio
async def test_register_validates_input(client):
    resp = await client.post("/api/auth/register", json={**REGISTRATION, "email": "not-an-email"})
    assert resp.status_code == 422

    resp = await client.post("/api/auth/register", json={**REGISTRATION, "password": "123"})
    assert resp.status_code == 422

    # bcrypt ignores everything past 72 bytes, so such passwords are refused
    resp = await client.post("/api/auth/register", json={**REGISTRATION, "password": "é" * 40})
    assert resp.status_code == 422

    resp = await client.post("/api/auth/register", json={**REGISTRATION, "password": "x" * 72})
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_login_returns_token_usable_for_profile(client):
    await client.post("/api/auth/register", json=REGISTRATION)

    resp = await client.post(
        "/api/auth/login", json={"email": "jane@example.com", "password": "testpass123"}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["role"] == "user"
    assert data["first_name"] == "Jane"

    profile = await client.get(
        "/api/auth/profile", headers={"Authorization": f"Bearer {data['access_token']}"}
    )
    assert profile.status_code == 200
    assert profile.json()["email"] == "jane@example.com"


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    await client.post("/api/auth/register", json=REGISTRATION)

    resp = await client.post("/api/auth/login", json={"email": "jane@example.com", "password": "nope-nope"})
    assert resp.status_code == 401

    resp = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_profile_requires_auth(client):
    resp = await client.get("/api/auth/profile")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_update_profile(client):
    await client.post("/api/auth/register", json=REGISTRATION)
    login = await client.post(
        "/api/auth/login", json={"email": "jane@example.com", "password": "testpass123"}
    )
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    resp = await client.put("/api/auth/profile", json={"phone": "555-0199"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Profile updated successfully!"

    profile = await client.get("/api/auth/profile", headers=headers)
    assert profile.json()["phone"] == "555-0199"
    assert profile.json()["first_name"] == "Jane"
